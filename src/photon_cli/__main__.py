"""Allow ``python -m photon_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m photon_cli`` behaves identically to the ``photon``
console script.
"""

from __future__ import annotations

from photon_cli.cli.app import cli

if __name__ == "__main__":
    cli()
