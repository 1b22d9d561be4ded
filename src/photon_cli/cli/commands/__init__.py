"""Command modules, one per resource noun.

Each module exposes ``register(subparsers)``.  The order here is the
order nouns appear in ``photon --help``.
"""

from photon_cli.cli.commands import (
    clusters,
    deployments,
    hosts,
    images,
    networks,
    projects,
    system,
    target,
    tasks,
    tenants,
)

COMMAND_MODULES = (
    target,
    system,
    tenants,
    projects,
    images,
    networks,
    clusters,
    hosts,
    deployments,
    tasks,
)

__all__: list[str] = ["COMMAND_MODULES"]
