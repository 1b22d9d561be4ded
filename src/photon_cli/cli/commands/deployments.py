"""``photon deployment``: inspect and tear down deployments."""

from __future__ import annotations

import logging
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import add_noun, add_verb, cancelled, render_vms
from photon_cli.cli.commands.hosts import render_hosts
from photon_cli.cli.context import CommandContext
from photon_cli.core.models import Deployment

logger = logging.getLogger(__name__)


def destroy_deployment(ctx: CommandContext, deployment_id: str) -> None:
    """Remove a deployment and everything registered under it.

    Runs strictly in order: every host delete completes before the
    deployment is destroyed, and the destroy completes before the
    deployment record is deleted.
    """
    client = ctx.client
    hosts = ctx.collect(client.deployments.list_hosts(deployment_id), client.hosts.pages)
    logger.info("deleting %d host(s) of deployment %s", len(hosts), deployment_id)
    for host in hosts:
        ctx.wait_for_task(client.hosts.delete(host.id))

    ctx.wait_for_task(client.deployments.destroy(deployment_id))
    ctx.wait_for_task(client.deployments.delete(deployment_id))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def list_deployments(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    client = ctx.client
    deployments = ctx.collect(client.deployments.list(), client.deployments.pages)
    ctx.formatter.emit_list(
        deployments,
        ("ID", "State"),
        lambda d: (d.id, d.state),
    )
    return exit_codes.SUCCESS


def show_deployment(ctx: CommandContext) -> int:
    (deployment_id,) = ctx.check_arg_count(1)
    deployment: Deployment = ctx.client.deployments.get(deployment_id)
    ctx.formatter.emit_one(
        deployment,
        f"Deployment ID: {deployment.id}",
        [
            ("State", deployment.state),
            ("Image Datastores", deployment.image_datastores),
            ("Use image datastore for vms", deployment.use_image_datastore_for_vms),
            ("Syslog Endpoint", deployment.syslog_endpoint),
            ("Ntp Endpoint", deployment.ntp_endpoint),
            ("Auth Enabled", deployment.auth_enabled),
            ("LoadBalancer Enabled", deployment.loadbalancer_enabled),
        ],
        (
            deployment.id,
            deployment.state,
            deployment.image_datastores,
            deployment.use_image_datastore_for_vms,
            deployment.syslog_endpoint,
            deployment.ntp_endpoint,
            deployment.auth_enabled,
            deployment.loadbalancer_enabled,
        ),
    )
    return exit_codes.SUCCESS


def list_deployment_hosts(ctx: CommandContext) -> int:
    (deployment_id,) = ctx.check_arg_count(1)
    client = ctx.client
    return render_hosts(ctx, ctx.collect(client.deployments.list_hosts(deployment_id), client.hosts.pages))


def list_deployment_vms(ctx: CommandContext) -> int:
    (deployment_id,) = ctx.check_arg_count(1)
    client = ctx.client
    return render_vms(ctx, ctx.collect(client.deployments.list_vms(deployment_id), client.vms.pages))


def destroy(ctx: CommandContext) -> int:
    (deployment_id,) = ctx.check_arg_count(1)
    if not ctx.confirmed(f"Destroy deployment {deployment_id} and delete all of its hosts?"):
        return cancelled()
    destroy_deployment(ctx, deployment_id)
    return exit_codes.SUCCESS


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "deployment", "Options for deployment")

    add_verb(verbs, "list", list_deployments, "List all deployments")
    add_verb(verbs, "show", show_deployment, "Show deployment info", usage_args="<deployment-id>")
    add_verb(
        verbs, "list-hosts", list_deployment_hosts, "List the hosts of a deployment",
        usage_args="<deployment-id>",
    )
    add_verb(
        verbs, "list-vms", list_deployment_vms, "List the VMs of a deployment",
        usage_args="<deployment-id>",
    )
    add_verb(
        verbs, "destroy", destroy, "Delete all hosts, then destroy and delete a deployment",
        usage_args="<deployment-id>",
    )
