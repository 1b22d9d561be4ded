"""Custom exception hierarchy for photon-cli.

All exceptions that cross layer boundaries must inherit from
:class:`PhotonCliError`.  Raw third-party exceptions (e.g. from
``requests`` or ``yaml``) must NEVER propagate beyond the infrastructure
layer; they must be caught and re-raised as a typed subclass defined here.

Hierarchy
---------
PhotonCliError
├── ArgumentCountError
├── ValidationError
├── ConfigurationError
├── TransportError
│   └── ResourceNotFoundError
├── TaskFailedError
├── TaskTimeoutError
├── UnknownTaskStateError
└── OperationCancelledError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from photon_cli.core.models import Task


class PhotonCliError(Exception):
    """Base exception for all photon-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Local input problems --------------------------------------------------

class ArgumentCountError(PhotonCliError):
    """Raised when a command receives the wrong number of positional args."""

    def __init__(self, expected: int, received: int, *, hint: str | None = None) -> None:
        if received > expected:
            message = f"Unknown argument(s): expected {expected}, got {received}."
        else:
            message = f"Missing argument(s): expected {expected}, got {received}."
        super().__init__(message, hint=hint)
        self.expected: int = expected
        self.received: int = received


class ValidationError(PhotonCliError):
    """Raised when a required field is missing or malformed after prompting."""


class ConfigurationError(PhotonCliError):
    """Raised for an unreadable config file or an invalid local setting."""


# --- Server communication --------------------------------------------------

class TransportError(PhotonCliError):
    """Raised when the controller cannot be reached or answers non-2xx."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code: int | None = status_code
        self.error_code: str | None = error_code


class ResourceNotFoundError(TransportError):
    """Raised when the controller answers HTTP 404 for a resource."""


# --- Asynchronous task outcomes --------------------------------------------

class TaskFailedError(PhotonCliError):
    """Raised when a polled task reaches the server-side ERROR state."""

    def __init__(self, operation: str, message: str, *, task: Task | None = None) -> None:
        super().__init__(f"Task '{operation}' failed: {message}")
        self.operation: str = operation
        self.task: Task | None = task


class TaskTimeoutError(PhotonCliError):
    """Raised when a task does not finish within the configured timeout."""

    def __init__(self, task_id: str, last_state: str, timeout: float) -> None:
        super().__init__(
            f"Timed out after {timeout:g}s waiting for task {task_id} "
            f"(last state: {last_state}).",
            hint=f"Check progress later with: photon task show {task_id}",
        )
        self.task_id: str = task_id
        self.last_state: str = last_state


class UnknownTaskStateError(PhotonCliError):
    """Raised when the server reports a task state this client does not know."""

    def __init__(self, task_id: str, state: str) -> None:
        super().__init__(
            f"Task {task_id} reported unrecognized state '{state}'.",
            hint="The server may be newer than this client; try upgrading photon-cli.",
        )
        self.task_id: str = task_id
        self.state: str = state


class OperationCancelledError(PhotonCliError):
    """Raised when the user aborts a prompt or an in-flight wait."""
