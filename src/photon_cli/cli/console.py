"""CLI console helpers with optional Rich support.

Two proxies are exported: :data:`console` writes messages, prompts and
progress to stderr, :data:`out` writes command results to stdout so
that they can be piped.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import sys
from typing import Any

from photon_cli.exceptions import ConfigurationError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``ConfigurationError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise ConfigurationError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console instance targeting stderr (or stdout)."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr, highlight=False)


def rich_available() -> bool:
	try:
		_load_rich_console_class()
	except ConfigurationError:
		return False
	return True


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self, *, stderr: bool) -> None:
		self._stderr = stderr

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain print."""
		stream = sys.stderr if self._stderr else sys.stdout
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except ConfigurationError:
			print(*objects, file=stream)
			return
		rich_console.print(*objects)

	def write(self, text: str) -> None:
		"""Write *text* verbatim, bypassing markup and wrapping."""
		stream = sys.stderr if self._stderr else sys.stdout
		stream.write(text)
		stream.flush()


console = _ConsoleProxy(stderr=True)
out = _ConsoleProxy(stderr=False)
