# treecopy/core/rich_display.py

import logging
from pathlib import Path
from threading import Lock
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    FileSizeColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
    TotalFileSizeColumn,
    TransferSpeedColumn,
)

from .interfaces.types import CopyStats, MoveOutcome, ProgressReport
from .utils import format_size

logger = logging.getLogger(__name__)


class FileNameColumn(TextColumn):
    """Custom column for displaying filename with consistent width"""
    def __init__(self, width: int = 30):
        super().__init__(f"{{task.description:.{width}s}}")


class RichProgressDisplay:
    """
    Terminal progress bar fed by ProgressReport values.

    Use as a context manager and pass the instance itself as ``on_progress``:

        with RichProgressDisplay() as display:
            engine.copy_directory(src, dst, on_progress=display)
    """

    def __init__(self, console: Optional[Console] = None, enabled: bool = True):
        self.console = console or Console()
        self.enabled = enabled
        self.display_lock = Lock()
        self.progress: Optional[Progress] = None
        self.task_id = None
        self.last_report: Optional[ProgressReport] = None

    def _create_progress_instance(self) -> Progress:
        return Progress(
            SpinnerColumn(),
            FileNameColumn(width=40),
            BarColumn(complete_style="blue"),
            FileSizeColumn(),
            TextColumn("/"),
            TotalFileSizeColumn(),
            TransferSpeedColumn(),
            TextColumn("ETA:"),
            TimeRemainingColumn(),
            expand=True,
            console=self.console,
        )

    def __enter__(self):
        if self.enabled:
            self.progress = self._create_progress_instance()
            self.task_id = self.progress.add_task("Scanning", total=None)
            self.progress.start()
            logger.debug("Progress display started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.progress is not None:
            self.progress.stop()
            self.progress = None
            logger.debug("Progress display stopped")
        return False

    def __call__(self, report: ProgressReport) -> None:
        self.update(report)

    def update(self, report: ProgressReport) -> None:
        """Move the bar to the state described by ``report``."""
        with self.display_lock:
            self.last_report = report
            if self.progress is None:
                return
            name = Path(report.current_path).name if report.current_path else "Total"
            self.progress.update(
                self.task_id,
                description=f"[{report.entries_done}/{report.entries_total}] {escape(name)}",
                total=report.bytes_total,
                completed=report.bytes_done,
            )

    def show_copy_summary(self, stats: CopyStats) -> None:
        self.console.print(
            f"[green]Copied[/green] {stats.files_copied} files ({format_size(stats.total_bytes)}), "
            f"{stats.directories_created} directories, {stats.symlinks_created} symlinks; "
            f"{stats.entries_skipped} skipped"
        )
        for path in stats.skipped_paths:
            self.console.print(f"  [yellow]skipped[/yellow] {escape(str(path))}", highlight=False)

    def show_move_summary(self, outcome: MoveOutcome) -> None:
        messages = {
            MoveOutcome.RENAMED_DIRECTLY: "[green]Moved[/green] by direct rename",
            MoveOutcome.COPIED_THEN_SOURCE_REMOVED: "[green]Moved[/green] by copying and removing the source",
            MoveOutcome.SKIPPED: "[yellow]Skipped[/yellow]: destination already exists",
        }
        self.console.print(messages[outcome])

    def show_error(self, error: Exception) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(str(error))}", highlight=False)
        for step in getattr(error, "recovery_steps", None) or []:
            self.console.print(f"  - {escape(step)}", highlight=False)
