"""
Progress rendering — a single rich status line on stderr.

Usage::

    tracker = ProgressTracker("Sending", total=104857600)
    tracker.start()
    tracker.show(written)       # called by the copier, already throttled
    tracker.stop()              # final render + newline

When *total* is unknown (receiver side: a raw stream carries no length)
the line shows a running byte count instead of a percentage.
"""

from __future__ import annotations

from rich.console import Console
from rich.progress import Progress, TaskID, TextColumn, TransferSpeedColumn

from .units import format_bytes


class ProgressTracker:
    """Live one-line progress display using Rich."""

    def __init__(
        self,
        operation: str,
        total: int | None = None,
        console: Console | None = None,
    ) -> None:
        self.operation = operation
        self.total = total if total and total > 0 else None
        self._task_id: TaskID | None = None
        self._progress = Progress(
            TextColumn("[bold cyan]{task.description}[/]: {task.fields[detail]}"),
            TransferSpeedColumn(),
            console=console or Console(stderr=True),
            auto_refresh=False,
        )

    def start(self) -> None:
        self._task_id = self._progress.add_task(
            self.operation, total=self.total, detail=self.describe(0)
        )
        self._progress.start()

    def show(self, written: int) -> None:
        if self._task_id is None:
            return
        self._progress.update(
            self._task_id, completed=written, detail=self.describe(written)
        )
        self._progress.refresh()

    def stop(self) -> None:
        self._progress.stop()

    def describe(self, written: int) -> str:
        if self.total is None:
            return format_bytes(written)
        percent = written / self.total * 100
        return f"{percent:.1f}% ({format_bytes(written)}/{format_bytes(self.total)})"


class NullProgress:
    """Drop-in no-op replacement when --progress is not set."""

    def start(self) -> None: ...
    def show(self, written: int) -> None: ...
    def stop(self) -> None: ...
