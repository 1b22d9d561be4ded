"""Interactive prompts for the CLI layer.

This module is responsible for:

* Asking for values the user did not pass as flags.
* Asking for confirmation before destructive or final steps.

Prompts only ever *fill* a value: when a flag already supplied it, no
question is shown.  Handlers run these prompts as a pre-pass that builds
a request spec before the first network call, and skip them entirely in
non-interactive mode.
"""

from __future__ import annotations

from typing import Any

from photon_cli.exceptions import ConfigurationError, OperationCancelledError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive input."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise ConfigurationError(
            "questionary is not installed. Install with: pip install questionary",
            hint="Or pass every value as a flag together with --non-interactive.",
        ) from exc
    return questionary


def ask_for_input(message: str, current: str = "", *, secret: bool = False) -> str:
    """Return *current* if set, otherwise prompt for a value.

    Raises
    ------
    OperationCancelledError
        If the user dismisses the prompt (Ctrl+C / Esc).
    """
    if current:
        return current

    questionary = _import_questionary()
    prompt = questionary.password(message) if secret else questionary.text(message)
    answer: str | None = prompt.ask()  # Returns None on Ctrl+C / Esc
    if answer is None:
        raise OperationCancelledError("Input cancelled.")
    return answer.strip()


def confirm(message: str = "Are you sure?") -> bool:
    """Ask a yes/no question; defaults to *no*.

    Raises
    ------
    OperationCancelledError
        If the user dismisses the prompt.
    """
    questionary = _import_questionary()
    answer: bool | None = questionary.confirm(message, default=False).ask()
    if answer is None:
        raise OperationCancelledError("Confirmation cancelled.")
    return answer
