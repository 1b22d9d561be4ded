"""``photon system``: controller-wide status, deploy and teardown."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import add_noun, add_verb, cancelled
from photon_cli.cli.commands.deployments import destroy_deployment
from photon_cli.cli.console import console, out
from photon_cli.cli.context import CommandContext
from photon_cli.cli.output import OutputFormat
from photon_cli.core.models import SystemStatus, Task
from photon_cli.core.specs import AvailabilityZoneCreateSpec
from photon_cli.exceptions import TransportError
from photon_cli.infra.dc_map_loader import load_deployment_map

logger = logging.getLogger(__name__)


def show_status(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    status: SystemStatus = ctx.client.system.status()
    formatter = ctx.formatter

    if formatter.structured:
        formatter.document(status)
    elif formatter.format is OutputFormat.SCRIPT:
        formatter.script([("Overall", status.status)])
        formatter.script((c.component, c.status) for c in status.components)
    else:
        out.write(f"Overall status: {status.status}\n\n")
        formatter.table(
            ("Component", "Status", "Message"),
            [(c.component, c.status, c.message) for c in status.components],
        )
    return exit_codes.SUCCESS


def destroy_system(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    if not ctx.confirmed("Destroy every deployment on this controller?"):
        return cancelled()

    client = ctx.client
    deployments = ctx.collect(client.deployments.list(), client.deployments.pages)
    for deployment in deployments:
        destroy_deployment(ctx, deployment.id)
    return exit_codes.SUCCESS


def _created_id(ctx: CommandContext, task: Task, what: str) -> str:
    finished = ctx.poll(task.id, show_progress=True)
    if finished.entity is None or not finished.entity.id:
        raise TransportError(f"Creating {what} finished without reporting its id.")
    if ctx.formatter.format is OutputFormat.TABLE:
        console.print(f"Created {what}: {finished.entity.id}")
    return finished.entity.id


def deploy_system(ctx: CommandContext) -> int:
    """Create a deployment, its zones and hosts from a map file, then deploy it.

    Every step waits for its task before the next one is submitted.
    """
    (map_path,) = ctx.check_arg_count(1)
    dc_map = load_deployment_map(map_path)
    client = ctx.client

    deployment_id = _created_id(ctx, client.deployments.create(dc_map.deployment), "deployment")

    zone_ids: dict[str, str] = {}
    for zone in dc_map.availability_zones:
        task = client.availability_zones.create(AvailabilityZoneCreateSpec(name=zone))
        zone_ids[zone] = _created_id(ctx, task, f"availability zone '{zone}'")

    logger.info("registering %d host(s) with deployment %s", len(dc_map.hosts), deployment_id)
    for host in dc_map.hosts:
        spec = replace(host, availability_zone=zone_ids.get(host.availability_zone, ""))
        task = client.hosts.create(spec, deployment_id=deployment_id)
        _created_id(ctx, task, f"host {host.address}")

    ctx.wait_and_show(client.deployments.deploy(deployment_id), client.deployments.get)
    return exit_codes.SUCCESS


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "system", "Options for system operations")

    add_verb(verbs, "status", show_status, "Show the status of controller components")
    add_verb(
        verbs, "deploy", deploy_system, "Deploy the controller described by a deployment map",
        usage_args="<dc-map.yml>",
    )
    add_verb(verbs, "destroy", destroy_system, "Destroy all deployments, one at a time")
