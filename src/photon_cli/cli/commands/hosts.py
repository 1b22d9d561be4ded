"""``photon host``: ESX hosts registered with the controller."""

from __future__ import annotations

import json
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import add_noun, add_verb, cancelled, render_tasks, render_vms
from photon_cli.cli.context import CommandContext
from photon_cli.core.models import Host
from photon_cli.core.quota import split_list
from photon_cli.core.specs import HostCreateSpec
from photon_cli.exceptions import ValidationError

USAGE_TAGS: tuple[str, ...] = ("MGMT", "CLOUD")

# CLI verb -> REST action path segment
STATE_ACTIONS: dict[str, tuple[str, str]] = {
    "suspend": ("suspend", "Suspend a host"),
    "resume": ("resume", "Resume a suspended host"),
    "enter-maintenance": ("enter_maintenance", "Put a host into maintenance mode"),
    "exit-maintenance": ("exit_maintenance", "Take a host out of maintenance mode"),
    "provision": ("provision", "Provision a host"),
}


def _parse_metadata(raw: str) -> dict[str, str]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid host metadata: {exc}", hint="Pass a JSON object.") from exc
    if not isinstance(value, dict):
        raise ValidationError("Host metadata must be a JSON object.")
    return {str(k): str(v) for k, v in value.items()}


def build_create_spec(ctx: CommandContext) -> HostCreateSpec:
    args = ctx.args
    address = ctx.require(ctx.ask("Host address: ", args.address), "a host address")
    username = ctx.require(ctx.ask("Username: ", args.username), "a username")
    password = ctx.require(ctx.ask("Password: ", args.password, secret=True), "a password")
    tags = tuple(t.upper() for t in split_list(ctx.ask("Usage tags (e.g. CLOUD,MGMT): ", args.tags)))
    unknown = [t for t in tags if t not in USAGE_TAGS]
    if unknown:
        raise ValidationError(
            f"Invalid usage tag(s): {', '.join(unknown)}.",
            hint=f"Use any of: {', '.join(USAGE_TAGS)}",
        )
    return HostCreateSpec(
        address=address,
        username=username,
        password=password,
        tags=tags,
        metadata=_parse_metadata(args.metadata),
        availability_zone=args.availability_zone,
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def create_host(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    spec = build_create_spec(ctx)
    client = ctx.client
    task = client.hosts.create(spec, deployment_id=ctx.args.deployment_id)
    ctx.wait_and_show(task, client.hosts.get)
    return exit_codes.SUCCESS


def delete_host(ctx: CommandContext) -> int:
    (host_id,) = ctx.check_arg_count(1)
    if not ctx.confirmed(f"Delete host {host_id}?"):
        return cancelled()
    ctx.wait_for_task(ctx.client.hosts.delete(host_id))
    return exit_codes.SUCCESS


def render_hosts(ctx: CommandContext, hosts: list[Host]) -> int:
    ctx.formatter.emit_list(
        hosts,
        ("ID", "State", "IP", "Tags"),
        lambda h: (h.id, h.state, h.address, h.tags),
    )
    return exit_codes.SUCCESS


def list_hosts(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    client = ctx.client
    return render_hosts(ctx, ctx.collect(client.hosts.list(), client.hosts.pages))


def show_host(ctx: CommandContext) -> int:
    (host_id,) = ctx.check_arg_count(1)
    host: Host = ctx.client.hosts.get(host_id)
    metadata = ",".join(f"{k}:{v}" for k, v in sorted(host.metadata.items()))
    ctx.formatter.emit_one(
        host,
        f"Host ID: {host.id}",
        [
            ("IP", host.address),
            ("State", host.state),
            ("Username", host.username),
            ("Tags", host.tags),
            ("Metadata", metadata),
            ("AvailabilityZone", host.availability_zone),
            ("Version", host.esx_version),
        ],
        (host.id, host.username, host.address, host.tags, host.state, metadata, host.availability_zone),
    )
    return exit_codes.SUCCESS


def list_host_vms(ctx: CommandContext) -> int:
    (host_id,) = ctx.check_arg_count(1)
    client = ctx.client
    return render_vms(ctx, ctx.collect(client.hosts.list_vms(host_id), client.vms.pages))


def host_tasks(ctx: CommandContext) -> int:
    (host_id,) = ctx.check_arg_count(1)
    client = ctx.client
    page = client.hosts.list_tasks(host_id, state=ctx.args.state)
    return render_tasks(ctx, ctx.collect(page, client.tasks.pages))


def set_availability_zone(ctx: CommandContext) -> int:
    host_id, zone_id = ctx.check_arg_count(2)
    client = ctx.client
    ctx.wait_and_show(client.hosts.set_availability_zone(host_id, zone_id), client.hosts.get)
    return exit_codes.SUCCESS


def _state_action(action: str) -> Any:
    def handler(ctx: CommandContext) -> int:
        (host_id,) = ctx.check_arg_count(1)
        client = ctx.client
        ctx.wait_and_show(client.hosts.action(host_id, action), client.hosts.get)
        return exit_codes.SUCCESS

    return handler


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "host", "Options for host")

    parser = add_verb(verbs, "create", create_host, "Add a new host")
    parser.add_argument("-u", "--username", default="", help="Username to create host")
    parser.add_argument("-p", "--password", default="", help="Password to create host")
    parser.add_argument("-i", "--address", default="", help="IP address of the host")
    parser.add_argument("-t", "--tags", default="", help="Comma separated usage tags: MGMT, CLOUD")
    parser.add_argument("-m", "--metadata", default="", help="Host metadata as a JSON object")
    parser.add_argument("-z", "--availability_zone", dest="availability_zone", default="",
                        help="Availability zone id")
    parser.add_argument("-d", "--deployment_id", dest="deployment_id", default="",
                        help="Deployment the host is added to")
    add_verb(verbs, "delete", delete_host, "Delete a host", usage_args="<host-id>")
    add_verb(verbs, "list", list_hosts, "List all hosts")
    add_verb(verbs, "show", show_host, "Show host info", usage_args="<host-id>")
    add_verb(verbs, "list-vms", list_host_vms, "List the VMs on a host", usage_args="<host-id>")
    parser = add_verb(verbs, "tasks", host_tasks, "List host tasks", usage_args="<host-id>")
    parser.add_argument("-s", "--state", default="", help="Filter by task state")
    add_verb(
        verbs, "set-availability-zone", set_availability_zone, "Set the availability zone of a host",
        usage_args="<host-id> <zone-id>",
    )
    for verb, (action, text) in STATE_ACTIONS.items():
        add_verb(verbs, verb, _state_action(action), text, usage_args="<host-id>")
