# treecopy/core/tree_scanner.py

import logging
import os
import stat
from pathlib import Path
from typing import List, Optional, Tuple

from .exceptions import ScanError
from .interfaces.types import PathKind, TransferPlan, TreeEntry
from .utils import format_size

logger = logging.getLogger(__name__)


def _entry_kind(dir_entry: os.DirEntry) -> Tuple[PathKind, int]:
    """Classify a directory entry without following links; returns (kind, size)."""
    st = dir_entry.stat(follow_symlinks=False)
    if stat.S_ISLNK(st.st_mode):
        try:
            is_dir = dir_entry.is_dir(follow_symlinks=True)
        except OSError:
            is_dir = False
        return (PathKind.SYMLINK_DIRECTORY if is_dir else PathKind.SYMLINK_FILE), 0
    if stat.S_ISDIR(st.st_mode):
        return PathKind.DIRECTORY, 0
    if stat.S_ISREG(st.st_mode):
        return PathKind.FILE, st.st_size
    return PathKind.OTHER, 0


class TreeScanner:
    """Builds a TransferPlan for a directory tree."""

    def __init__(self, max_depth: Optional[int] = None):
        """
        Initialize the scanner.

        Args:
            max_depth: Deepest level to descend into. Direct children of the
                root are at depth 0; directories at ``max_depth`` are recorded
                but not entered. None means no limit.
        """
        if max_depth is not None and max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.max_depth = max_depth

    def _list_directory(self, directory: Path) -> List[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise ScanError(f"Cannot list directory {directory}: {e}", path=directory) from e

    def scan(self, root: Path) -> TransferPlan:
        """
        Walk ``root`` depth-first and return the plan of everything below it.

        Every directory is listed before any of its descendants. Symlinks are
        recorded as links and never entered. The root itself is not part of
        the plan.

        Raises:
            ScanError: If any entry cannot be read while walking
        """
        root = Path(root)
        entries: List[TreeEntry] = []
        total_bytes = 0

        # Each frame holds the remaining children of one directory
        stack = [(iter(self._list_directory(root)), Path(), 0)]
        while stack:
            children, rel_dir, depth = stack[-1]
            dir_entry = next(children, None)
            if dir_entry is None:
                stack.pop()
                continue

            relative_path = rel_dir / dir_entry.name
            try:
                kind, size = _entry_kind(dir_entry)
            except OSError as e:
                raise ScanError(f"Cannot read {dir_entry.path}: {e}",
                                path=Path(dir_entry.path)) from e

            entries.append(TreeEntry(relative_path=relative_path, kind=kind,
                                     size=size, depth=depth))
            total_bytes += size

            if kind == PathKind.DIRECTORY:
                logger.debug(f"Scanning directory {relative_path}")
                if self.max_depth is None or depth < self.max_depth:
                    stack.append((iter(self._list_directory(Path(dir_entry.path))),
                                  relative_path, depth + 1))

        plan = TransferPlan(root=root, entries=tuple(entries), total_bytes=total_bytes)
        logger.info(f"Scanned {root}: {plan.total_entries} entries, {format_size(total_bytes)}")
        return plan


def scan_tree(root: Path, max_depth: Optional[int] = None) -> TransferPlan:
    """Convenience wrapper around TreeScanner(max_depth).scan(root)."""
    return TreeScanner(max_depth=max_depth).scan(root)
