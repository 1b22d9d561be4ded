"""Process-wide logging configuration for one CLI invocation.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where records go.  Rich's handler is used when available so that
log lines interleave cleanly with spinners on stderr.
"""

from __future__ import annotations

import logging
import os
import sys

from photon_cli.cli.console import get_rich_console
from photon_cli.exceptions import ConfigurationError

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_LEVEL_ENV_VAR: str = "PHOTON_LOG_LEVEL"
DEFAULT_LOG_LEVEL: str = "WARNING"


def resolve_log_level(flag_value: str | None) -> str:
    """Flag wins over ``$PHOTON_LOG_LEVEL``, which wins over the default."""
    candidate = (flag_value or os.environ.get(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL).upper()
    return candidate if candidate in LOG_LEVELS else DEFAULT_LOG_LEVEL


def setup_logging(level: str) -> None:
    """Configure the root logger to write *level* and above to stderr."""
    handler: logging.Handler
    try:
        from rich.logging import RichHandler

        handler = RichHandler(console=get_rich_console(stderr=True), show_path=False)
        fmt = "%(name)s: %(message)s"
    except (ModuleNotFoundError, ConfigurationError):
        handler = logging.StreamHandler(sys.stderr)
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(level=level, format=fmt, handlers=[handler], force=True)
    # urllib3 logs every connection at DEBUG; keep it one notch quieter.
    logging.getLogger("urllib3").setLevel(max(logging.INFO, logging.getLevelName(level)))
