"""
cli/ui/progress.py - Progress tracking for concurrent collection

Thread-safe progress tracker with success/failure separation.
The total grows page by page while the listing is still running.

Example:
    from cli.ui.progress import parallel_progress

    with parallel_progress("Lambda Function 수집") as tracker:
        result = parallel_collect(source, fetch, concurrency=8, progress_tracker=tracker)

    success, failed, total = tracker.stats
    console.print(f"완료: {success}개 성공, {failed}개 실패")
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

if TYPE_CHECKING:
    from rich.console import Console

from .console import err_console


class SuccessFailColumn(ProgressColumn):
    """Custom column showing success/fail counts: '40✓ 10✗'"""

    def __init__(self, tracker: ParallelTracker) -> None:
        super().__init__()
        self._tracker = tracker

    def render(self, task: Task) -> Text:
        success, failed, _ = self._tracker.stats
        text = Text()
        text.append(f"{success}", style="green")
        text.append("✓ ", style="green")
        text.append(f"{failed}", style="red")
        text.append("✗", style="red")
        return text


class ParallelTracker:
    """Thread-safe collection progress tracker.

    Display format:
        [spinner] Lambda Function 수집 40✓ 10✗ / 50/120 [progress bar] 00:15

    Thread-safety:
        All public methods are thread-safe via internal locking.
        add_total() is called by the feeder, on_complete() by worker threads.
    """

    def __init__(self, progress: Progress, task_id: TaskID, description: str) -> None:
        self._progress = progress
        self._task_id = task_id
        self._description = description
        self._lock = threading.Lock()
        self._success = 0
        self._failed = 0
        self._total = 0

    def add_total(self, count: int) -> None:
        """Grow the total as pages are listed.

        Args:
            count: Number of refs found in the page
        """
        with self._lock:
            self._total += count
            self._progress.update(self._task_id, total=self._total)

    def on_complete(self, success: bool) -> None:
        """Record job completion (thread-safe).

        Args:
            success: True if the detail fetch succeeded, False if skipped
        """
        with self._lock:
            if success:
                self._success += 1
            else:
                self._failed += 1
            self._progress.update(self._task_id, completed=self._success + self._failed)

    @property
    def stats(self) -> tuple[int, int, int]:
        """Get current statistics (success, failed, total)."""
        with self._lock:
            return (self._success, self._failed, self._total)


@contextmanager
def parallel_progress(
    description: str,
    console: Console | None = None,
    disable: bool = False,
) -> Generator[ParallelTracker, None, None]:
    """Context manager for collection progress.

    Args:
        description: Description for the progress bar
        console: Rich Console to use (default: stderr console)
        disable: Hide the progress bar (counts are still tracked)

    Yields:
        ParallelTracker passed to the collector as progress_tracker
    """
    cons = console or err_console

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn(""),  # SuccessFailColumn 자리
        TextColumn("/"),
        MofNCompleteColumn(),
        BarColumn(bar_width=40),
        TimeElapsedColumn(),
        console=cons,
        expand=False,
        transient=False,
        disable=disable,
    )

    with progress:
        task_id = progress.add_task(f"[cyan]{description}", total=None)
        tracker = ParallelTracker(progress, task_id, description)

        progress.columns = (
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            SuccessFailColumn(tracker),
            TextColumn("/"),
            MofNCompleteColumn(),
            BarColumn(bar_width=40),
            TimeElapsedColumn(),
        )

        try:
            yield tracker
        finally:
            _success, failed, total = tracker.stats
            if total > 0:
                if failed == 0:
                    final_desc = f"[green]{description} 완료"
                else:
                    final_desc = f"[yellow]{description} 완료 ({failed}개 실패)"
                progress.update(task_id, description=final_desc)
