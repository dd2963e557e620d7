# treecopy/core/progress_tracker.py

import logging
from pathlib import Path
from typing import Callable, Optional

from .interfaces.types import ProgressReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressReport], None]


class ProgressTracker:
    """Byte and entry accounting for one operation, reported through a single callback."""

    def __init__(self, on_progress: Optional[ProgressCallback] = None,
                 total_bytes: int = 0, total_entries: int = 0, byte_interval: int = 0):
        """
        Initialize the progress tracker.

        Args:
            on_progress: Callable receiving each ProgressReport, or None
            total_bytes: Bytes the operation expects to move
            total_entries: Entries the operation expects to process
            byte_interval: Minimum bytes between two mid-file reports;
                0 reports after every chunk
        """
        self.on_progress = on_progress
        self.total_bytes = total_bytes
        self.total_entries = total_entries
        self.byte_interval = max(0, byte_interval)
        self.bytes_done = 0
        self.entries_done = 0
        self.current_path: Optional[Path] = None
        self.reports_sent = 0
        self._entry_bytes = 0
        self._bytes_since_report = 0

    def start_entry(self, path: Path) -> None:
        """Mark ``path`` as the entry being processed."""
        self.current_path = path
        self._entry_bytes = 0
        self._bytes_since_report = 0

    def advance(self, nbytes: int) -> None:
        """Account for ``nbytes`` more bytes of the current entry."""
        if nbytes <= 0:
            return
        self.bytes_done += nbytes
        self._entry_bytes += nbytes
        self._bytes_since_report += nbytes
        if self._bytes_since_report >= self.byte_interval:
            self._emit()

    def complete_entry(self, remaining_bytes: int = 0) -> None:
        """
        Mark the current entry as processed and always report.

        Args:
            remaining_bytes: Bytes of the entry that were accounted for without
                being copied (skipped entries)
        """
        if remaining_bytes > 0:
            self.bytes_done += remaining_bytes
        self.entries_done += 1
        self._emit()

    def report(self) -> ProgressReport:
        return ProgressReport(
            bytes_done=self.bytes_done,
            bytes_total=self.total_bytes,
            entries_done=self.entries_done,
            entries_total=self.total_entries,
            current_path=self.current_path,
        )

    def _emit(self) -> None:
        self._bytes_since_report = 0
        if self.on_progress is None:
            return
        self.on_progress(self.report())
        self.reports_sent += 1
