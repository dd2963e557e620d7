# treecopy/core/move_strategy.py

import errno
import logging
import os
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from .conflict_resolver import resolve
from .exceptions import (
    ConflictError, CrossDeviceFallbackError, TransferCancelledError,
    TransferIOError, TreeCopyError, infer_error_type,
)
from .file_context import io_errors
from .file_operations import copy_symlink
from .interfaces.types import (
    ConflictAction, ConflictPolicy, CopyStats, MoveOutcome, PathKind,
    ProgressReport, TransferPlan,
)
from .path_classifier import classify
from .tree_scanner import TreeScanner

if TYPE_CHECKING:
    from .transfer_engine import TransferEngine

logger = logging.getLogger(__name__)


class MoveStrategySelector:
    """
    Chooses between a direct rename and copy-then-delete for moves.

    A direct rename is always attempted first. Only a cross-device failure
    (EXDEV) switches to the copy fallback; every other rename failure is
    reported as a TransferIOError. An existing, non-empty destination
    directory cannot be renamed onto, so that case merges through the copy
    path under the caller's policy.
    """

    def __init__(self, engine: "TransferEngine", rename: Callable = os.replace):
        self.engine = engine
        self.rename = rename

    def _try_rename(self, source: Path, destination: Path) -> bool:
        """
        Attempt a direct rename.

        Returns:
            bool: True if renamed, False if source and destination are on
                different devices

        Raises:
            TransferIOError: For any other rename failure
        """
        try:
            self.rename(source, destination)
        except OSError as e:
            if e.errno == errno.EXDEV:
                logger.info(f"{source} and {destination} are on different devices, "
                            f"falling back to copy and delete")
                return False
            raise TransferIOError(f"Rename failed for {source}: {e}", path=source,
                                  source=source, destination=destination,
                                  error_type=infer_error_type(e)) from e
        logger.info(f"Renamed {source} -> {destination}")
        return True

    def move_file(self, source: Path, destination: Path, policy: ConflictPolicy) -> MoveOutcome:
        action = resolve(destination, policy)
        if action == ConflictAction.ABORT:
            raise ConflictError(f"Destination already exists: {destination}",
                                path=destination, policy=policy)
        if action == ConflictAction.SKIP:
            logger.info(f"Skipped move, destination exists: {destination}")
            return MoveOutcome.SKIPPED

        with io_errors(destination.parent, "Create directory"):
            destination.parent.mkdir(parents=True, exist_ok=True)

        if self._try_rename(source, destination):
            return MoveOutcome.RENAMED_DIRECTLY

        try:
            if classify(source).is_symlink:
                if os.path.lexists(destination):
                    with io_errors(destination, "Remove"):
                        os.unlink(destination)
                copy_symlink(source, destination)
            else:
                self.engine.copy_file(source, destination, ConflictPolicy.OVERWRITE)
        except TreeCopyError as e:
            raise CrossDeviceFallbackError(
                f"Cross-device move of {source} failed while copying: {e}",
                source=source, destination=destination, source_removed=False, cause=e,
            ) from e

        try:
            with io_errors(source, "Remove source"):
                os.unlink(source)
        except TransferIOError as e:
            raise CrossDeviceFallbackError(
                f"Copied {source} to {destination} but could not remove the source: {e}",
                source=source, destination=destination, source_removed=False, cause=e,
            ) from e
        return MoveOutcome.COPIED_THEN_SOURCE_REMOVED

    def move_directory(self, source: Path, destination: Path, policy: ConflictPolicy,
                       on_progress: Optional[Callable[[ProgressReport], None]] = None,
                       stop_event: Optional[threading.Event] = None) -> MoveOutcome:
        dest_kind = classify(destination)

        if dest_kind == PathKind.DIRECTORY and not any(destination.iterdir()):
            # An empty directory can be replaced by the rename
            with io_errors(destination, "Remove empty directory"):
                destination.rmdir()
        elif dest_kind in (PathKind.DIRECTORY, PathKind.SYMLINK_DIRECTORY):
            logger.info(f"Destination {destination} is not empty, merging")
            return self._copy_then_remove(source, destination, policy, on_progress,
                                          stop_event, cross_device=False)

        with io_errors(destination.parent, "Create directory"):
            destination.parent.mkdir(parents=True, exist_ok=True)

        # Totals for the final report must be taken before the tree moves
        plan = TreeScanner().scan(source) if on_progress is not None else None

        try:
            renamed = self._try_rename(source, destination)
        except TransferIOError:
            if dest_kind == PathKind.DIRECTORY:
                self._restore_empty_directory(destination)
            raise

        if renamed:
            if plan is not None:
                on_progress(ProgressReport(
                    bytes_done=plan.total_bytes, bytes_total=plan.total_bytes,
                    entries_done=plan.total_entries, entries_total=plan.total_entries,
                    current_path=destination,
                ))
            return MoveOutcome.RENAMED_DIRECTLY

        return self._copy_then_remove(source, destination, policy, on_progress,
                                      stop_event, cross_device=True)

    @staticmethod
    def _restore_empty_directory(destination: Path) -> None:
        try:
            destination.mkdir(exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not recreate empty directory {destination}: {e}")

    def _copy_then_remove(self, source: Path, destination: Path, policy: ConflictPolicy,
                          on_progress, stop_event, cross_device: bool) -> MoveOutcome:
        """
        Copy the whole source tree, then delete what was transferred.

        The source is not touched until the copy phase has completed, so a
        failure during copying leaves it intact.
        """
        plan = TreeScanner().scan(source)

        try:
            stats = self.engine.transfer_plan(plan, destination, policy, on_progress, stop_event)
        except TransferCancelledError:
            raise
        except TreeCopyError as e:
            if not cross_device:
                raise
            raise CrossDeviceFallbackError(
                f"Cross-device move of {source} failed while copying, source left intact: {e}",
                source=source, destination=destination, source_removed=False, cause=e,
            ) from e

        removed = self._remove_source(plan, stats, destination, cross_device)
        logger.info(f"Moved {source} -> {destination} by copy ({removed} source entries removed)")
        return MoveOutcome.COPIED_THEN_SOURCE_REMOVED

    def _remove_source(self, plan: TransferPlan, stats: CopyStats, destination: Path,
                       cross_device: bool) -> int:
        """
        Delete the transferred part of the source tree, children before parents.

        Skipped entries stay in place, and so does every directory that still
        contains one of them.

        Returns:
            int: Number of source entries removed
        """
        root = plan.root
        skipped = set(stats.skipped_paths)
        removed = 0
        try:
            # Reverse preorder visits children before their parent
            for entry in reversed(plan.entries):
                path = root / entry.relative_path
                with io_errors(path, "Remove source"):
                    if entry.kind == PathKind.DIRECTORY:
                        if not any(path.iterdir()):
                            path.rmdir()
                            removed += 1
                    elif entry.relative_path not in skipped:
                        os.unlink(path)
                        removed += 1
            with io_errors(root, "Remove source"):
                if not any(root.iterdir()):
                    root.rmdir()
                    removed += 1
                else:
                    logger.warning(f"Left {len(skipped)} skipped entries in {root}")
            return removed
        except TransferIOError as e:
            if not cross_device:
                raise
            raise CrossDeviceFallbackError(
                f"Copied {root} but failed while removing the source: {e}",
                source=root, destination=destination, source_removed=removed > 0, cause=e,
            ) from e
