# treecopy/core/interfaces/types.py
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Optional, Tuple
from pathlib import Path


class PathKind(Enum):
    """Kind of a filesystem entry, as seen at the moment of the query"""
    FILE = auto()
    DIRECTORY = auto()
    SYMLINK_FILE = auto()
    SYMLINK_DIRECTORY = auto()
    OTHER = auto()
    NOT_FOUND = auto()

    @property
    def is_symlink(self) -> bool:
        return self in (PathKind.SYMLINK_FILE, PathKind.SYMLINK_DIRECTORY)


class ConflictPolicy(str, Enum):
    """Rule applied whenever a destination entry already exists"""
    ABORT = "abort"
    SKIP = "skip"
    OVERWRITE = "overwrite"


class ConflictAction(Enum):
    PROCEED = auto()
    SKIP = auto()
    ABORT = auto()


class MoveOutcome(Enum):
    """Which strategy a move ended up using"""
    RENAMED_DIRECTLY = auto()
    COPIED_THEN_SOURCE_REMOVED = auto()
    SKIPPED = auto()


@dataclass(frozen=True)
class TreeEntry:
    relative_path: Path
    kind: PathKind
    size: int = 0
    depth: int = 0


@dataclass(frozen=True)
class TransferPlan:
    """
    Flattened description of a directory tree, captured once before a transfer.

    Entries are ordered so that every directory appears before any of its
    descendants.
    """
    root: Path
    entries: Tuple[TreeEntry, ...] = ()
    total_bytes: int = 0

    @property
    def total_entries(self) -> int:
        return len(self.entries)

    @property
    def files(self) -> Tuple[TreeEntry, ...]:
        return tuple(e for e in self.entries if e.kind == PathKind.FILE)

    @property
    def directories(self) -> Tuple[TreeEntry, ...]:
        return tuple(e for e in self.entries if e.kind == PathKind.DIRECTORY)

    @property
    def symlinks(self) -> Tuple[TreeEntry, ...]:
        return tuple(e for e in self.entries if e.kind.is_symlink)


@dataclass(frozen=True)
class ProgressReport:
    bytes_done: int
    bytes_total: int
    entries_done: int
    entries_total: int
    current_path: Optional[Path] = None

    @property
    def fraction(self) -> float:
        if self.bytes_total > 0:
            return self.bytes_done / self.bytes_total
        if self.entries_total > 0:
            return self.entries_done / self.entries_total
        return 1.0


@dataclass
class CopyStats:
    """What a copy actually did. Skipped entries count as processed."""
    total_bytes: int = 0
    total_entries: int = 0
    files_copied: int = 0
    directories_created: int = 0
    symlinks_created: int = 0
    entries_skipped: int = 0
    skipped_paths: list = field(default_factory=list)
