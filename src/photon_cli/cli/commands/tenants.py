"""``photon tenant``: create, inspect and select tenants."""

from __future__ import annotations

from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import (
    add_noun,
    add_verb,
    cancelled,
    render_tasks,
    security_groups_to_string,
)
from photon_cli.cli.console import console, out
from photon_cli.cli.context import CommandContext
from photon_cli.cli.output import OutputFormat
from photon_cli.core.models import Tenant
from photon_cli.core.quota import split_list
from photon_cli.core.specs import TenantCreateSpec
from photon_cli.infra.config_store import NamedRef


def create_tenant(ctx: CommandContext) -> int:
    (name,) = ctx.check_arg_count(1)
    name = ctx.require(ctx.ask("Tenant name: ", name), "a tenant name")
    groups = ctx.ask("Security groups (comma separated, optional): ", ctx.args.security_groups or "")
    spec = TenantCreateSpec(name=name, security_groups=tuple(split_list(groups)))

    client = ctx.client
    ctx.wait_and_show(client.tenants.create(spec), client.tenants.get)
    return exit_codes.SUCCESS


def delete_tenant(ctx: CommandContext) -> int:
    (tenant_id,) = ctx.check_arg_count(1)
    if not ctx.confirmed(f"Delete tenant {tenant_id}?"):
        return cancelled()

    ctx.wait_for_task(ctx.client.tenants.delete(tenant_id))

    config = ctx.config
    if config.tenant is not None and config.tenant.id == tenant_id:
        ctx.save_config(config.with_tenant(None))
    return exit_codes.SUCCESS


def list_tenants(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    client = ctx.client
    tenants = ctx.collect(client.tenants.list(), client.tenants.pages)
    ctx.formatter.emit_list(
        tenants,
        ("ID", "Name"),
        lambda t: (t.id, t.name),
    )
    return exit_codes.SUCCESS


def show_tenant(ctx: CommandContext) -> int:
    (tenant_id,) = ctx.check_arg_count(1)
    tenant: Tenant = ctx.client.tenants.get(tenant_id)
    groups = security_groups_to_string(tenant.security_groups)
    ctx.formatter.emit_one(
        tenant,
        f"Tenant ID: {tenant.id}",
        [("Name", tenant.name), ("Security Groups", groups)],
        (tenant.id, tenant.name, groups),
    )
    return exit_codes.SUCCESS


def set_tenant(ctx: CommandContext) -> int:
    (name,) = ctx.check_arg_count(1)
    ref = ctx.resolve_tenant(name)
    ctx.save_config(ctx.config.with_tenant(ref))
    if ctx.formatter.format is OutputFormat.TABLE:
        console.print(f"Tenant set to '{ref.name}'")
    return exit_codes.SUCCESS


def get_tenant(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    print_current("tenant", ctx.config.tenant, ctx)
    return exit_codes.SUCCESS


def print_current(noun: str, ref: NamedRef | None, ctx: CommandContext) -> None:
    """Show the default tenant or project saved in the config."""
    if ctx.formatter.structured:
        ctx.formatter.document(ref)
    elif ref is None:
        console.print(f"No {noun} selected")
    elif ctx.formatter.format is OutputFormat.SCRIPT:
        out.write(f"{ref.id}\t{ref.name}\n")
    else:
        console.print(f"Current {noun} is '{ref.name}' with ID {ref.id}")


def tenant_tasks(ctx: CommandContext) -> int:
    (tenant_id,) = ctx.check_arg_count(1)
    client = ctx.client
    tasks = ctx.collect(client.tenants.list_tasks(tenant_id, state=ctx.args.state), client.tasks.pages)
    return render_tasks(ctx, tasks)


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "tenant", "Options for tenant")

    parser = add_verb(verbs, "create", create_tenant, "Create a new tenant", usage_args="<name>")
    parser.add_argument("-s", "--security-groups", default="", help="Comma separated security groups")
    add_verb(verbs, "delete", delete_tenant, "Delete a tenant", usage_args="<tenant-id>")
    add_verb(verbs, "list", list_tenants, "List all tenants")
    add_verb(verbs, "show", show_tenant, "Show tenant info", usage_args="<tenant-id>")
    add_verb(verbs, "set", set_tenant, "Select the default tenant", usage_args="<name>")
    add_verb(verbs, "get", get_tenant, "Show the default tenant")
    parser = add_verb(verbs, "tasks", tenant_tasks, "List tenant tasks", usage_args="<tenant-id>")
    parser.add_argument("-s", "--state", default="", help="Filter by task state")
