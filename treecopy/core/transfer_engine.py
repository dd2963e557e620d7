# treecopy/core/transfer_engine.py

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from .checksum import ChecksumCalculator
from .config_manager import TransferConfig
from .conflict_resolver import ConflictResolver
from .context_managers import operation_context
from .exceptions import ConflictError, TransferCancelledError, TransferIOError
from .file_context import io_errors
from .file_operations import copy_file_chunked, copy_symlink, ensure_directory
from .interfaces.types import (
    ConflictAction, ConflictPolicy, CopyStats, MoveOutcome, PathKind,
    TransferPlan, TreeEntry,
)
from .move_strategy import MoveStrategySelector
from .path_classifier import size_of_file
from .path_utils import normalize
from .progress_tracker import ProgressCallback, ProgressTracker
from .tree_scanner import TreeScanner
from .utils import format_size, remove_tree
from .validation import validate_transfer_request

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def _is_real_directory(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


class TransferEngine:
    """
    Copies and moves single files and whole directory trees.

    Every operation runs to completion on the calling thread. Progress is
    delivered through the optional ``on_progress`` callable; a
    ``threading.Event`` passed as ``stop_event`` is checked before each entry
    and cancels the operation when set.
    """

    def __init__(self, config: Optional[TransferConfig] = None,
                 rename: Optional[Callable[[PathLike, PathLike], None]] = None):
        """
        Initialize the transfer engine.

        Args:
            config: Transfer settings; defaults are used when None
            rename: Rename primitive used for moves (defaults to os.replace)
        """
        self.config = config or TransferConfig()
        self.move_selector = MoveStrategySelector(self, rename=rename or os.replace)
        self.checksum = ChecksumCalculator()

    def _policy(self, policy: Optional[ConflictPolicy]) -> ConflictPolicy:
        if policy is None:
            return self.config.default_policy
        return policy

    @staticmethod
    def _check_stop(stop_event: Optional[threading.Event], path: Path) -> None:
        if stop_event is not None and stop_event.is_set():
            logger.warning(f"Stop requested, not starting {path}")
            raise TransferCancelledError(f"Transfer cancelled before {path}", path=path)

    # Single files

    def copy_file(self, source: PathLike, destination: PathLike,
                  policy: Optional[ConflictPolicy] = None,
                  on_progress: Optional[ProgressCallback] = None,
                  stop_event: Optional[threading.Event] = None) -> CopyStats:
        """
        Copy one file, reporting progress after every chunk.

        Returns:
            CopyStats: Bytes written and entries processed (1)

        Raises:
            ValidationError: If the request is malformed
            ConflictError: If the destination exists and policy is ABORT
            TransferIOError: If reading or writing fails
        """
        policy = self._policy(policy)
        source = normalize(source)
        destination = normalize(destination)

        with operation_context(f"copy_file {source} -> {destination}"):
            validate_transfer_request(policy, source, destination, expect_directory=False)
            size = size_of_file(source)
            tracker = ProgressTracker(on_progress, total_bytes=size, total_entries=1,
                                      byte_interval=self.config.progress_byte_interval)
            stats = CopyStats()
            self._check_stop(stop_event, source)

            with io_errors(destination.parent, "Create directory"):
                destination.parent.mkdir(parents=True, exist_ok=True)

            entry = TreeEntry(relative_path=Path(destination.name), kind=PathKind.FILE, size=size)
            self._transfer_file(entry, source, destination, ConflictResolver(policy), tracker, stats)
            return stats

    def move_file(self, source: PathLike, destination: PathLike,
                  policy: Optional[ConflictPolicy] = None) -> MoveOutcome:
        """
        Move one file (or symlink), renaming directly when possible.

        Returns:
            MoveOutcome: How the move was carried out
        """
        policy = self._policy(policy)
        source = normalize(source)
        destination = normalize(destination)

        with operation_context(f"move_file {source} -> {destination}"):
            validate_transfer_request(policy, source, destination, expect_directory=False,
                                      follow_source_link=False)
            return self.move_selector.move_file(source, destination, policy)

    # Directory trees

    def copy_directory(self, source: PathLike, destination: PathLike,
                       policy: Optional[ConflictPolicy] = None,
                       on_progress: Optional[ProgressCallback] = None,
                       stop_event: Optional[threading.Event] = None) -> CopyStats:
        """
        Copy the tree below ``source`` into ``destination``.

        The destination root is created if missing and accepted if it already
        exists as a directory. Everything below it goes through the conflict
        policy entry by entry, in plan order.

        Returns:
            CopyStats: Totals of what was transferred (root not counted)

        Raises:
            ValidationError: If the request is malformed
            ScanError: If the source tree cannot be read
            ConflictError: At the first existing entry under ABORT
            TransferIOError: At the first entry that fails to transfer
            TransferCancelledError: If ``stop_event`` was set
        """
        policy = self._policy(policy)
        source = normalize(source)
        destination = normalize(destination)

        with operation_context(f"copy_directory {source} -> {destination}"):
            validate_transfer_request(policy, source, destination, expect_directory=True)
            plan = TreeScanner(max_depth=self.config.max_depth).scan(source)
            return self.transfer_plan(plan, destination, policy, on_progress, stop_event)

    def move_directory(self, source: PathLike, destination: PathLike,
                       policy: Optional[ConflictPolicy] = None,
                       on_progress: Optional[ProgressCallback] = None,
                       stop_event: Optional[threading.Event] = None) -> MoveOutcome:
        """
        Move the tree at ``source`` to ``destination``.

        Returns:
            MoveOutcome: RENAMED_DIRECTLY or COPIED_THEN_SOURCE_REMOVED
        """
        policy = self._policy(policy)
        source = normalize(source)
        destination = normalize(destination)

        with operation_context(f"move_directory {source} -> {destination}"):
            validate_transfer_request(policy, source, destination, expect_directory=True,
                                      follow_source_link=False)
            return self.move_selector.move_directory(source, destination, policy,
                                                     on_progress, stop_event)

    def transfer_plan(self, plan: TransferPlan, destination: Path, policy: ConflictPolicy,
                      on_progress: Optional[ProgressCallback] = None,
                      stop_event: Optional[threading.Event] = None) -> CopyStats:
        """
        Execute a scanned plan into ``destination``, strictly in plan order.

        Nothing is rolled back on failure: entries finished before the failing
        one stay on disk.
        """
        resolver = ConflictResolver(policy)
        tracker = ProgressTracker(on_progress, total_bytes=plan.total_bytes,
                                  total_entries=plan.total_entries,
                                  byte_interval=self.config.progress_byte_interval)
        stats = CopyStats()
        # Subtrees whose destination slot is taken by a non-directory under SKIP
        skipped_roots = set()

        self._check_stop(stop_event, plan.root)
        ensure_directory(destination, parents=True)

        for entry in plan.entries:
            src = plan.root / entry.relative_path
            dst = destination / entry.relative_path
            self._check_stop(stop_event, src)

            if skipped_roots and any(p in skipped_roots for p in entry.relative_path.parents):
                tracker.start_entry(entry.relative_path)
                self._record_skip(entry, stats)
                tracker.complete_entry(remaining_bytes=entry.size)
                continue

            if entry.kind == PathKind.DIRECTORY:
                self._transfer_directory(entry, dst, resolver, tracker, stats, skipped_roots)
            elif entry.kind == PathKind.FILE:
                self._transfer_file(entry, src, dst, resolver, tracker, stats)
            elif entry.kind.is_symlink:
                self._transfer_symlink(entry, src, dst, resolver, tracker, stats)
            else:
                raise TransferIOError(f"Unsupported entry type at {src}", path=src,
                                      source=src, destination=dst, error_type="io")

        logger.info(
            f"Transferred {stats.total_entries} entries into {destination}: "
            f"{stats.files_copied} files ({format_size(stats.total_bytes)}), "
            f"{stats.directories_created} directories, {stats.symlinks_created} symlinks, "
            f"{stats.entries_skipped} skipped, {resolver.conflicts_seen} already existed"
        )
        return stats

    # Per-entry steps

    @staticmethod
    def _record_skip(entry: TreeEntry, stats: CopyStats) -> None:
        stats.total_entries += 1
        stats.entries_skipped += 1
        stats.skipped_paths.append(entry.relative_path)
        logger.info(f"Skipped existing entry: {entry.relative_path}")

    @staticmethod
    def _conflict(dst: Path, policy: ConflictPolicy, reason: str = "Destination already exists"):
        return ConflictError(f"{reason}: {dst}", path=dst, policy=policy)

    def _transfer_directory(self, entry: TreeEntry, dst: Path, resolver: ConflictResolver,
                            tracker: ProgressTracker, stats: CopyStats, skipped_roots: set) -> None:
        tracker.start_entry(entry.relative_path)
        action = resolver.resolve(dst)

        if action == ConflictAction.ABORT:
            raise self._conflict(dst, resolver.policy)
        if action == ConflictAction.SKIP:
            if not _is_real_directory(dst):
                skipped_roots.add(entry.relative_path)
            self._record_skip(entry, stats)
            tracker.complete_entry()
            return

        if os.path.lexists(dst) and not _is_real_directory(dst):
            with io_errors(dst, "Remove"):
                remove_tree(dst)
        # An existing directory is merged, never recreated
        if ensure_directory(dst):
            stats.directories_created += 1
        stats.total_entries += 1
        tracker.complete_entry()

    def _transfer_file(self, entry: TreeEntry, src: Path, dst: Path, resolver: ConflictResolver,
                       tracker: ProgressTracker, stats: CopyStats) -> None:
        tracker.start_entry(entry.relative_path)
        action = resolver.resolve(dst)

        if action == ConflictAction.ABORT:
            raise self._conflict(dst, resolver.policy)
        if action == ConflictAction.SKIP:
            self._record_skip(entry, stats)
            tracker.complete_entry(remaining_bytes=entry.size)
            return
        if _is_real_directory(dst):
            raise self._conflict(dst, resolver.policy, "Cannot replace a directory with a file")

        hash_obj = self.checksum.create_hash() if self.config.verify_transfers else None
        written = copy_file_chunked(src, dst, tracker=tracker,
                                    preserve_metadata=self.config.preserve_metadata,
                                    hash_obj=hash_obj)
        if hash_obj is not None:
            self.checksum.verify_checksum(dst, hash_obj.hexdigest())

        stats.total_bytes += written
        stats.files_copied += 1
        stats.total_entries += 1
        tracker.complete_entry()

    def _transfer_symlink(self, entry: TreeEntry, src: Path, dst: Path, resolver: ConflictResolver,
                          tracker: ProgressTracker, stats: CopyStats) -> None:
        tracker.start_entry(entry.relative_path)
        action = resolver.resolve(dst)

        if action == ConflictAction.ABORT:
            raise self._conflict(dst, resolver.policy)
        if action == ConflictAction.SKIP:
            self._record_skip(entry, stats)
            tracker.complete_entry()
            return
        if _is_real_directory(dst):
            raise self._conflict(dst, resolver.policy, "Cannot replace a directory with a symlink")
        if os.path.lexists(dst):
            with io_errors(dst, "Remove"):
                os.unlink(dst)

        copy_symlink(src, dst)
        stats.symlinks_created += 1
        stats.total_entries += 1
        tracker.complete_entry()


_default_engine: Optional[TransferEngine] = None


def get_engine() -> TransferEngine:
    """Shared engine with default settings used by the module-level functions."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TransferEngine()
    return _default_engine


def copy_file(source: PathLike, destination: PathLike,
              policy: ConflictPolicy = ConflictPolicy.ABORT,
              on_progress: Optional[ProgressCallback] = None,
              stop_event: Optional[threading.Event] = None) -> CopyStats:
    return get_engine().copy_file(source, destination, policy, on_progress, stop_event)


def move_file(source: PathLike, destination: PathLike,
              policy: ConflictPolicy = ConflictPolicy.ABORT) -> MoveOutcome:
    return get_engine().move_file(source, destination, policy)


def copy_directory(source: PathLike, destination: PathLike,
                   policy: ConflictPolicy = ConflictPolicy.ABORT,
                   on_progress: Optional[ProgressCallback] = None,
                   stop_event: Optional[threading.Event] = None) -> CopyStats:
    return get_engine().copy_directory(source, destination, policy, on_progress, stop_event)


def move_directory(source: PathLike, destination: PathLike,
                   policy: ConflictPolicy = ConflictPolicy.ABORT,
                   on_progress: Optional[ProgressCallback] = None,
                   stop_event: Optional[threading.Event] = None) -> MoveOutcome:
    return get_engine().move_directory(source, destination, policy, on_progress, stop_event)
