"""Result rendering for the CLI layer.

Three renderings are supported:

* ``table``: human-readable Rich table (plain columns without Rich).
* ``script``: one tab-separated line per object, no headers; selected
  by ``--non-interactive``.
* ``json`` / ``yaml``: structured documents; selected by ``--output``.

All results go to stdout.  A failure while serialising is logged and
swallowed: formatting never fails a command that already succeeded.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any, TypeVar

import yaml

from photon_cli.cli.console import get_rich_console, out
from photon_cli.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutputFormat(str, Enum):
    TABLE = "table"
    SCRIPT = "script"
    JSON = "json"
    YAML = "yaml"


STRUCTURED_CHOICES: tuple[str, ...] = (OutputFormat.JSON.value, OutputFormat.YAML.value)


def select_format(*, non_interactive: bool, output: str | None) -> OutputFormat:
    """``--output`` wins; otherwise non-interactive means script lines."""
    if output:
        return OutputFormat(output)
    return OutputFormat.SCRIPT if non_interactive else OutputFormat.TABLE


# ---------------------------------------------------------------------------
# Presentation helpers (pure, no I/O)
# ---------------------------------------------------------------------------

def cell(value: object) -> str:
    """Render one value the way both tables and script lines expect."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (tuple, list)):
        return ",".join(cell(item) for item in value)
    return str(value)


def to_document(value: Any) -> Any:
    """Convert models into plain JSON/YAML-safe containers."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_document(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): to_document(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_document(item) for item in value]
    return value


def render_document(value: Any, fmt: OutputFormat) -> str:
    document = to_document(value)
    if fmt is OutputFormat.YAML:
        return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)
    return json.dumps(document, indent=2) + "\n"


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

class Formatter:
    """Writes results in the format chosen for this invocation."""

    def __init__(self, fmt: OutputFormat) -> None:
        self.format: OutputFormat = fmt

    @property
    def structured(self) -> bool:
        return self.format in (OutputFormat.JSON, OutputFormat.YAML)

    # ------------------------------------------------------------------
    # Primitive writers
    # ------------------------------------------------------------------

    def document(self, value: Any) -> None:
        """Write *value* as JSON or YAML; log instead of failing."""
        fmt = self.format if self.structured else OutputFormat.JSON
        try:
            text = render_document(value, fmt)
        except (TypeError, ValueError, yaml.YAMLError) as exc:
            logger.warning("could not render %s output: %s", fmt.value, exc)
            return
        out.write(text)

    def script(self, rows: Iterable[Sequence[object]]) -> None:
        for row in rows:
            out.write("\t".join(cell(value) for value in row) + "\n")

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[object]],
        *,
        title: str | None = None,
    ) -> None:
        try:
            from rich.table import Table
            from rich.text import Text

            rich_out = get_rich_console(stderr=False)
        except (ModuleNotFoundError, ConfigurationError):
            self._plain_table(headers, rows)
            return

        table = Table(title=title, show_header=True, header_style="bold cyan", border_style="dim")
        for header in headers:
            table.add_column(header, overflow="fold")
        for row in rows:
            table.add_row(*(Text(cell(value)) for value in row))
        rich_out.print(table)

    def details(self, title: str, pairs: Sequence[tuple[str, object]]) -> None:
        """Render a ``label: value`` block for a single object."""
        width = max((len(label) for label, _ in pairs), default=0) + 1
        lines = [title]
        lines.extend(f"  {label + ':':<{width}} {cell(value)}" for label, value in pairs)
        out.write("\n".join(lines) + "\n")

    @staticmethod
    def _plain_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
        text_rows = [list(headers)] + [[cell(value) for value in row] for row in rows]
        widths = [max(len(r[i]) for r in text_rows) for i in range(len(headers))]
        for r in text_rows:
            out.write("  ".join(v.ljust(w) for v, w in zip(r, widths)).rstrip() + "\n")

    # ------------------------------------------------------------------
    # Composite emitters used by handlers
    # ------------------------------------------------------------------

    def emit_list(
        self,
        items: Sequence[T],
        headers: Sequence[str],
        row: Callable[[T], Sequence[object]],
        *,
        script_row: Callable[[T], Sequence[object]] | None = None,
        title: str | None = None,
        total_label: str = "Total",
    ) -> None:
        if self.structured:
            self.document(list(items))
        elif self.format is OutputFormat.SCRIPT:
            self.script((script_row or row)(item) for item in items)
        else:
            self.table(headers, [row(item) for item in items], title=title)
            out.write(f"\n{total_label}: {len(items)}\n")

    def emit_one(
        self,
        item: Any,
        title: str,
        pairs: Sequence[tuple[str, object]],
        script_row: Sequence[object],
    ) -> None:
        if self.structured:
            self.document(item)
        elif self.format is OutputFormat.SCRIPT:
            self.script([script_row])
        else:
            self.details(title, pairs)
