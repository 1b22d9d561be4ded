"""Task completion poller.

Every mutating controller call answers with a :class:`Task`.  The
:class:`TaskPoller` re-reads that task until it reaches a terminal
state and translates the outcome into either the affected entity id or
a typed exception.

Guarantees
----------
* Only a pending task state loops; transport errors surface on the
  first occurrence and are never retried.
* An unrecognized state string aborts immediately with
  :class:`~photon_cli.exceptions.UnknownTaskStateError`.
* Waiting happens on a :class:`threading.Event`, so setting the event
  from another thread or a signal handler ends the wait promptly with
  :class:`~photon_cli.exceptions.OperationCancelledError`.
* Only :class:`~photon_cli.exceptions.PhotonCliError` subclasses escape.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from photon_cli.core.models import Task, TaskState
from photon_cli.core.parsing import task_error_message
from photon_cli.core.protocols import TaskFetcher
from photon_cli.exceptions import (
    ConfigurationError,
    OperationCancelledError,
    PhotonCliError,
    TaskFailedError,
    TaskTimeoutError,
    TransportError,
    UnknownTaskStateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL: float = 1.0
"""Seconds between two consecutive task reads."""


@dataclass(frozen=True, slots=True)
class PollPolicy:
    """How long and how often to poll a task."""

    interval: float = DEFAULT_POLL_INTERVAL
    """Seconds to wait between fetches.  Must be positive."""

    timeout: float | None = None
    """Maximum total wait in seconds; ``None`` waits indefinitely."""

    on_progress: Callable[[Task], None] | None = None
    """Invoked with every observed non-terminal task snapshot."""

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ConfigurationError(
                f"Poll interval must be positive, got {self.interval:g}.",
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(
                f"Poll timeout must be positive, got {self.timeout:g}.",
            )


class TaskPoller:
    """Blocks until a task finishes.

    Parameters
    ----------
    fetcher:
        Any object satisfying the :class:`TaskFetcher` protocol.
    policy:
        Interval / timeout / progress settings.
    cancel_event:
        Optional cancellation token.  When set, the current wait ends
        and :class:`OperationCancelledError` is raised.
    clock:
        Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        fetcher: TaskFetcher,
        policy: PollPolicy | None = None,
        *,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher: TaskFetcher = fetcher
        self._policy: PollPolicy = policy or PollPolicy()
        self._cancel: threading.Event = cancel_event or threading.Event()
        self._clock: Callable[[], float] = clock

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def wait(self, task_id: str) -> Task:
        """Poll *task_id* until COMPLETED and return the final snapshot.

        Raises
        ------
        ValidationError
            If *task_id* is empty.
        TaskFailedError
            If the task reaches ERROR.
        UnknownTaskStateError
            If the server reports a state outside :class:`TaskState`.
        TaskTimeoutError
            If the policy timeout elapses first.
        OperationCancelledError
            If the cancellation token is set.
        TransportError
            If a fetch fails.
        """
        if not task_id:
            raise ValidationError("A task id is required to wait on a task.")

        policy = self._policy
        deadline = None if policy.timeout is None else self._clock() + policy.timeout

        while True:
            if self._cancel.is_set():
                raise OperationCancelledError(f"Stopped waiting for task {task_id}.")

            task = self._fetch(task_id)
            logger.debug("task %s %s: %s", task_id, task.operation, task.raw_state)

            if task.state is TaskState.COMPLETED:
                return task
            if task.state is TaskState.ERROR:
                raise TaskFailedError(task.operation, task_error_message(task), task=task)
            if task.state is TaskState.UNRECOGNIZED:
                raise UnknownTaskStateError(task_id, task.raw_state)

            if policy.on_progress is not None:
                policy.on_progress(task)

            delay = policy.interval
            if deadline is not None:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise TaskTimeoutError(task_id, task.raw_state, policy.timeout or 0.0)
                delay = min(delay, remaining)

            if self._cancel.wait(delay):
                raise OperationCancelledError(f"Stopped waiting for task {task_id}.")

    def wait_for_entity(self, task_id: str) -> str:
        """Poll *task_id* and return the id of the entity it acted upon.

        Tasks that report no entity yield an empty string on success.
        """
        task = self.wait(task_id)
        return task.entity.id if task.entity is not None else ""

    # ------------------------------------------------------------------
    # Fetcher delegation (safe boundary)
    # ------------------------------------------------------------------

    def _fetch(self, task_id: str) -> Task:
        """Call the fetcher and ensure only our exceptions escape."""
        try:
            return self._fetcher.get(task_id)
        except PhotonCliError:
            raise
        except Exception as exc:
            raise TransportError(f"Unexpected error reading task {task_id}: {exc}") from exc
