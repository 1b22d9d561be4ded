"""``photon network``: physical or software-defined subnets.

The controller reports its networking mode through ``GET /v1/info``.
Physical deployments manage port-group backed subnets; software-defined
deployments manage virtual subnets owned by a project.
"""

from __future__ import annotations

import logging
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import add_noun, add_verb, cancelled
from photon_cli.cli.context import CommandContext
from photon_cli.core.models import Subnet
from photon_cli.core.quota import split_list
from photon_cli.core.specs import PhysicalSubnetCreateSpec, VirtualSubnetCreateSpec
from photon_cli.exceptions import ValidationError

logger = logging.getLogger(__name__)

PHYSICAL: str = "PHYSICAL"
SOFTWARE_DEFINED: str = "SOFTWARE_DEFINED"
NOT_AVAILABLE: str = "NOT_AVAILABLE"

ROUTING_TYPES: tuple[str, ...] = ("ROUTED", "ISOLATED")


def network_type(ctx: CommandContext) -> str:
    info = ctx.client.system.info()
    logger.debug("controller network type: %s", info.network_type)
    if info.network_type == NOT_AVAILABLE:
        raise ValidationError("Network type is missing")
    if info.network_type not in (PHYSICAL, SOFTWARE_DEFINED):
        raise ValidationError(f"Unsupported network type '{info.network_type}'.")
    return info.network_type


def _positive_int(raw: str, what: str, *, allow_zero: bool = False) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid {what} '{raw}'.") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ValidationError(f"{what.capitalize()} must be positive.")
    return value


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def create_network(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    args = ctx.args
    kind = network_type(ctx)

    name = ctx.require(ctx.ask("Network name: ", args.name), "a network name")
    description = ctx.ask("Description of network: ", args.description)
    client = ctx.client

    if kind == PHYSICAL:
        port_groups = ctx.ask("Port groups of network (comma separated): ", args.portgroups)
        groups = tuple(split_list(port_groups))
        if not groups:
            raise ValidationError("Please provide port groups.")
        physical = PhysicalSubnetCreateSpec(name=name, port_groups=groups, description=description)
        task = client.subnets.create(physical)
    else:
        routing = ctx.ask("Routing type (ROUTED or ISOLATED): ", args.routing_type).upper()
        if routing not in ROUTING_TYPES:
            raise ValidationError(
                f"Invalid routing type '{routing}'.", hint="Use ROUTED or ISOLATED.",
            )
        size = _positive_int(ctx.require(ctx.ask("Network size: ", args.size), "a network size"), "size")
        static_size = _positive_int(
            args.static_ip_size or "0", "reserved static IP size", allow_zero=True,
        )
        project_id = args.project_id or ctx.resolve_project().id
        virtual = VirtualSubnetCreateSpec(
            name=name,
            project_id=project_id,
            routing_type=routing,
            size=size,
            reserved_static_ip_size=static_size,
            description=description,
        )
        task = client.subnets.create_virtual(virtual)

    ctx.wait_and_show(task, client.subnets.get)
    return exit_codes.SUCCESS


def delete_network(ctx: CommandContext) -> int:
    (network_id,) = ctx.check_arg_count(1)
    network_type(ctx)
    if not ctx.confirmed(f"Delete network {network_id}?"):
        return cancelled()
    ctx.wait_for_task(ctx.client.subnets.delete(network_id))
    return exit_codes.SUCCESS


def list_networks(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    client = ctx.client
    if network_type(ctx) == PHYSICAL:
        subnets = ctx.collect(client.subnets.list(name=ctx.args.name), client.subnets.pages)
        ctx.formatter.emit_list(
            subnets,
            ("ID", "Name", "State", "PortGroups", "Descriptions", "IsDefault"),
            lambda s: (s.id, s.name, s.state, s.port_groups, s.description, s.is_default),
        )
        return exit_codes.SUCCESS

    project_id = ctx.args.project_id or ctx.resolve_project().id
    page = client.subnets.list_for_project(project_id, name=ctx.args.name)
    subnets = ctx.collect(page, client.subnets.pages)
    ctx.formatter.emit_list(
        subnets,
        ("ID", "Name", "State", "Description", "RoutingType", "IsDefault", "CIDR", "Range", "Size"),
        lambda s: (
            s.id,
            s.name,
            s.state,
            s.description,
            s.routing_type,
            s.is_default,
            s.cidr,
            _ip_range(s),
            s.size,
        ),
    )
    return exit_codes.SUCCESS


def _ip_range(subnet: Subnet) -> str:
    if not subnet.low_ip_dynamic and not subnet.high_ip_dynamic:
        return ""
    return f"{subnet.low_ip_dynamic}-{subnet.high_ip_dynamic}"


def show_network(ctx: CommandContext) -> int:
    (network_id,) = ctx.check_arg_count(1)
    kind = network_type(ctx)
    subnet: Subnet = ctx.client.subnets.get(network_id)
    pairs: list[tuple[str, object]] = [
        ("Name", subnet.name),
        ("State", subnet.state),
        ("Description", subnet.description),
        ("Is Default", subnet.is_default),
    ]
    if kind == PHYSICAL:
        pairs.append(("Port Groups", subnet.port_groups))
        row: tuple[object, ...] = (
            subnet.id, subnet.name, subnet.state, subnet.port_groups, subnet.description, subnet.is_default,
        )
    else:
        pairs.extend(
            [
                ("Routing Type", subnet.routing_type),
                ("CIDR", subnet.cidr),
                ("Dynamic IP Range", _ip_range(subnet)),
                ("Size", subnet.size),
                ("Reserved Static IP Size", subnet.reserved_static_ip_size),
            ],
        )
        row = (
            subnet.id,
            subnet.name,
            subnet.state,
            subnet.description,
            subnet.routing_type,
            subnet.is_default,
            subnet.cidr,
            _ip_range(subnet),
            subnet.size,
            subnet.reserved_static_ip_size,
        )
    ctx.formatter.emit_one(subnet, f"Network ID: {subnet.id}", pairs, row)
    return exit_codes.SUCCESS


def set_default_network(ctx: CommandContext) -> int:
    (network_id,) = ctx.check_arg_count(1)
    network_type(ctx)
    if not ctx.confirmed(f"Set network {network_id} as the default?"):
        return cancelled()
    client = ctx.client
    ctx.wait_and_show(client.subnets.set_default(network_id), client.subnets.get)
    return exit_codes.SUCCESS


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "network", "Options for network", aliases=("subnet",))

    parser = add_verb(verbs, "create", create_network, "Create a new network")
    parser.add_argument("-n", "--name", default="", help="Network name")
    parser.add_argument("-d", "--description", default="", help="Network description")
    parser.add_argument("-p", "--portgroups", default="", help="Comma separated port groups (physical)")
    parser.add_argument("-r", "--routing-type", default="", help="ROUTED or ISOLATED (software-defined)")
    parser.add_argument("-s", "--size", default="", help="Number of IPs (software-defined)")
    parser.add_argument(
        "-f", "--static-ip-size", default="", help="Reserved static IP count (software-defined)",
    )
    parser.add_argument("-i", "--project-id", default="", help="Owning project (software-defined)")
    add_verb(verbs, "delete", delete_network, "Delete a network", usage_args="<network-id>")
    parser = add_verb(verbs, "list", list_networks, "List networks")
    parser.add_argument("-n", "--name", default="", help="Filter by network name")
    parser.add_argument("-i", "--project-id", default="", help="Owning project (software-defined)")
    add_verb(verbs, "show", show_network, "Show network info", usage_args="<network-id>")
    add_verb(
        verbs, "set-default", set_default_network, "Set the default network",
        usage_args="<network-id>",
    )
