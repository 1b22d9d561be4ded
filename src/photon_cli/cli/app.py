"""CLI application entry point and command routing for photon-cli.

:func:`cli` is the **only** place where errors are turned into output.
It catches :class:`~photon_cli.exceptions.PhotonCliError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here; handlers in :mod:`photon_cli.cli.commands`
  do the work through a :class:`~photon_cli.cli.context.CommandContext`.
* The API client is built at most once per invocation and passed to the
  handler inside that context.
* Exit codes come from :mod:`photon_cli.cli.exit_codes` and are chosen
  nowhere else.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from photon_cli.cli import exit_codes
from photon_cli.cli.commands import COMMAND_MODULES
from photon_cli.cli.console import console
from photon_cli.cli.context import ClientFactory, CommandContext
from photon_cli.cli.logging_setup import LOG_LEVELS, resolve_log_level, setup_logging
from photon_cli.cli.output import STRUCTURED_CHOICES, Formatter, select_format
from photon_cli.core.poller import DEFAULT_POLL_INTERVAL, PollPolicy
from photon_cli.exceptions import OperationCancelledError, PhotonCliError
from photon_cli.infra.config_store import CliConfig, ConfigStore
from photon_cli.infra.photon_api import PhotonClient
from photon_cli.infra.rest_client import RestClient
from photon_cli.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _seconds(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level parser with one sub-parser per resource noun.

    Global flags precede the noun::

        photon -n --output json cluster create -n c1 -k KUBERNETES ...
    """
    parser = argparse.ArgumentParser(
        prog="photon",
        description="Command line interface for the Photon Controller API.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-n",
        "--non-interactive",
        action="store_true",
        help="Never prompt; print script-friendly tab separated output.",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=STRUCTURED_CHOICES,
        default=None,
        help="Print results as a structured document (takes precedence over -n).",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        default=None,
        help="Logging verbosity on stderr (default: $PHOTON_LOG_LEVEL or WARNING).",
    )
    parser.add_argument(
        "--poll-interval",
        type=_seconds,
        default=DEFAULT_POLL_INTERVAL,
        metavar="SECONDS",
        help=f"Seconds between task status checks (default {DEFAULT_POLL_INTERVAL:g}).",
    )
    parser.add_argument(
        "--timeout",
        type=_seconds,
        default=None,
        metavar="SECONDS",
        help="Give up waiting on a task after this many seconds (default: wait forever).",
    )

    nouns = parser.add_subparsers(dest="noun", metavar="<resource>", title="resources")
    for module in COMMAND_MODULES:
        module.register(nouns)
    return parser


def default_client_factory(config: CliConfig) -> PhotonClient:
    """Build the API client for the saved target."""
    rest = RestClient(config.cloud_target, token=config.token or None, verify=not config.ignore_cert)
    return PhotonClient(rest)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: ClientFactory | None = None,
    config_store: ConfigStore | None = None,
) -> int:
    """Run the photon CLI.

    Parameters
    ----------
    argv:
        Arguments to parse; ``None`` reads ``sys.argv[1:]``.
    client_factory:
        Builds the API client from the loaded config; injectable for tests.
    config_store:
        Where the local config lives; defaults to ``$PHOTON_CONFIG_FILE``
        or ``~/.photon-config``.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(resolve_log_level(args.log_level))

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return exit_codes.SUCCESS

    ctx = CommandContext(
        args,
        config_store=config_store or ConfigStore(),
        client_factory=client_factory or default_client_factory,
        formatter=Formatter(select_format(non_interactive=args.non_interactive, output=args.output)),
        poll_policy=PollPolicy(interval=args.poll_interval, timeout=args.timeout),
    )
    logger.debug("running %s %s", args.noun, getattr(args, "verb", ""))
    return handler(ctx)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: run :func:`main` and map errors to exit codes."""
    try:
        code = main()
        sys.exit(code)
    except OperationCancelledError as exc:
        console.print(f"\n[yellow]{exc}[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except PhotonCliError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
