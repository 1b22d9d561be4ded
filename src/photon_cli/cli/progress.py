"""Rich-based progress display driven by task polling.

This module bridges the poller's ``on_progress`` callback with a Rich
:class:`~rich.progress.Progress` spinner.  The core layer only forwards
raw :class:`~photon_cli.core.models.Task` snapshots.

Design
------
* The :class:`RichTaskProgress` manages a Rich Progress context.
* :meth:`__call__` is the callback passed via ``PollPolicy.on_progress``.
* Shutdown-safe: if the display is already stopped, calls are silently
  ignored.
"""

from __future__ import annotations

from typing import Any

from photon_cli.cli.console import get_rich_console
from photon_cli.core.models import Task
from photon_cli.exceptions import ConfigurationError


class RichTaskProgress:
    """Callable progress adapter for Rich.

    Usage::

        with RichTaskProgress() as progress:
            policy = PollPolicy(on_progress=progress)
            TaskPoller(client.tasks, policy).wait(task_id)
    """

    def __init__(self) -> None:
        try:
            from rich.progress import (
                BarColumn,
                MofNCompleteColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeElapsedColumn,
            )
        except ModuleNotFoundError as exc:
            raise ConfigurationError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=get_rich_console(),
            transient=True,
        )
        self._task_id: int | None = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichTaskProgress:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the Rich progress display."""
        if not self._started:
            self._progress.start()
            self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Poll callback
    # ------------------------------------------------------------------

    def __call__(self, task: Task) -> None:
        """Show the latest non-terminal snapshot of *task*."""
        if not self._started:
            return

        total = len(task.steps) or None
        done = sum(1 for step in task.steps if step.state == "COMPLETED")
        description = describe(task)

        if self._task_id is None:
            self._task_id = self._progress.add_task(description, total=total)
        self._progress.update(self._task_id, description=description, total=total, completed=done)


def describe(task: Task) -> str:
    """One-line summary such as ``CREATE_CLUSTER: STARTED (PROVISION_VM)``."""
    text = f"{task.operation}: {task.raw_state}"
    running = next((step for step in task.steps if step.state == "STARTED"), None)
    if running is not None:
        text += f" ({running.operation})"
    return text
