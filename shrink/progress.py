"""
Progress rendering — rich live progress bar.

Usage::

    tracker = ProgressTracker(action="compress")
    tracker.start()

    with tracker.file("video.mp4", size=104857600) as fp:
        for chunk in ...:
            fp.update_to(src.tell())

    tracker.stop()

The bar counts bytes consumed from the *source* file, so it runs from 0 to
the source size in both directions.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Union

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class FileProgress:
    """Context returned by ProgressTracker.file() — report bytes as you go."""

    def __init__(self, progress: Progress, task_id: TaskID, size: int) -> None:
        self._progress = progress
        self._task_id = task_id
        self._size = size
        self.completed = 0

    def advance(self, n: int) -> None:
        """Advance the progress bar by *n* source bytes."""
        self.update_to(self.completed + n)

    def update_to(self, position: int) -> None:
        """Move the bar to *position*; never backwards, never past the size."""
        position = min(position, self._size)
        if position <= self.completed:
            return
        self.completed = position
        self._progress.update(self._task_id, completed=position)

    def finish(self) -> None:
        self.completed = self._size
        self._progress.update(self._task_id, completed=max(self._size, 1))


class ProgressTracker:
    """Live single-file progress display using Rich."""

    def __init__(self, action: str, console: Console | None = None) -> None:
        self.action = action
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn(f"[bold cyan]{action}[/]"),
            TimeElapsedColumn(),
            BarColumn(bar_width=None),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            TextColumn("[dim]{task.fields[filename]}"),
            console=console or Console(stderr=True),
            expand=True,
        )

    def start(self) -> None:
        self._progress.start()

    def stop(self) -> None:
        self._progress.stop()

    @contextmanager
    def file(self, filename: str, size: int) -> Generator[FileProgress, None, None]:
        """Context manager for the progress of one source file."""
        task_id = self._progress.add_task(
            self.action,
            total=max(size, 1),
            filename=filename,
        )
        fp = FileProgress(self._progress, task_id, size)
        yield fp
        fp.finish()


class _NopFileProgress:
    completed = 0

    def advance(self, n: int) -> None: ...
    def update_to(self, position: int) -> None: ...
    def finish(self) -> None: ...


class NullProgress:
    """Drop-in no-op replacement when --quiet is set."""

    def start(self) -> None: ...
    def stop(self) -> None: ...

    @contextmanager
    def file(self, filename: str, size: int) -> Generator[FileProgress, None, None]:
        yield _NopFileProgress()  # type: ignore[misc]


AnyProgress = Union[ProgressTracker, NullProgress]
