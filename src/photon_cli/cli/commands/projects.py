"""``photon project``: projects, their quota and access policy."""

from __future__ import annotations

from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import (
    add_iam_commands,
    add_noun,
    add_verb,
    cancelled,
    render_tasks,
    security_groups_to_string,
)
from photon_cli.cli.commands.tenants import print_current
from photon_cli.cli.console import console
from photon_cli.cli.context import CommandContext
from photon_cli.cli.output import OutputFormat
from photon_cli.core.models import Project, QuotaLineItem
from photon_cli.core.quota import (
    limits_to_quota_spec,
    parse_limits,
    quota_to_string,
    split_list,
    subdivide_quota,
)
from photon_cli.core.specs import DEFAULT_ROUTER_PRIVATE_IP_CIDR, ProjectCreateSpec
from photon_cli.exceptions import ValidationError
from photon_cli.infra.config_store import NamedRef


def _parse_percent(raw: str) -> float:
    try:
        percent = float(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid percent '{raw}'.") from exc
    if not 0 < percent <= 100:
        raise ValidationError("Percent must be greater than 0 and at most 100.")
    return percent


def _print_project_summary(
    tenant: NamedRef,
    name: str,
    limits: tuple[QuotaLineItem, ...],
    percent: float | None,
) -> None:
    console.print(f"\nTenant name: {tenant.name}")
    console.print(f"Creating project name: {name}\n")
    if percent is not None:
        console.print(f"Project quota: {percent:g}% of the tenant quota")
        return
    console.print("Please make sure limits below are correct:")
    for index, item in enumerate(limits, start=1):
        console.print(f"{index}: {item.key}, {item.value:g}, {item.unit}")


def create_project(ctx: CommandContext) -> int:
    (name,) = ctx.check_arg_count(1)
    args = ctx.args
    if args.limits and args.percent:
        raise ValidationError("--limits and --percent cannot be used together.")

    name = ctx.require(ctx.ask("Project name: ", name), "a project name")
    limits = args.limits
    if not args.percent:
        limits = ctx.ask("Project limits (e.g. 'vm.count 10 COUNT, vm.memory 100 GB'): ", limits)
    parsed_limits = parse_limits(limits) if limits else ()
    percent = _parse_percent(args.percent) if args.percent else None

    tenant = ctx.resolve_tenant(args.tenant)
    if not ctx.non_interactive:
        _print_project_summary(tenant, name, parsed_limits, percent)
    if not ctx.confirmed():
        return cancelled()

    client = ctx.client
    if percent is not None:
        quota = subdivide_quota(client.tenants.get_quota(tenant.id), percent / 100.0)
    else:
        quota = limits_to_quota_spec(parsed_limits)

    spec = ProjectCreateSpec(
        name=name,
        quota_line_items=quota,
        security_groups=tuple(split_list(args.security_groups)),
        default_router_private_ip_cidr=args.default_router_private_ip_cidr,
    )
    ctx.wait_and_show(client.tenants.create_project(tenant.id, spec), client.projects.get)
    return exit_codes.SUCCESS


def delete_project(ctx: CommandContext) -> int:
    (project_id,) = ctx.check_arg_count(1)
    if not ctx.confirmed(f"Delete project {project_id}?"):
        return cancelled()

    ctx.wait_for_task(ctx.client.projects.delete(project_id))

    config = ctx.config
    if config.project is not None and config.project.id == project_id:
        ctx.save_config(config.with_project(None))
    return exit_codes.SUCCESS


def show_project(ctx: CommandContext) -> int:
    (project_id,) = ctx.check_arg_count(1)
    project: Project = ctx.client.projects.get(project_id)
    groups = security_groups_to_string(project.security_groups)
    pairs: list[tuple[str, object]] = [("Name", project.name), ("Security Groups", groups)]
    pairs.extend(
        (f"Limit {q.key}", f"{q.limit:g} {q.unit} (used {q.usage:g})") for q in project.quota
    )
    ctx.formatter.emit_one(
        project,
        f"Project ID: {project.id}",
        pairs,
        (project.id, project.name, quota_to_string(project.quota), groups),
    )
    return exit_codes.SUCCESS


def get_project(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    print_current("project", ctx.config.project, ctx)
    return exit_codes.SUCCESS


def set_project(ctx: CommandContext) -> int:
    (name,) = ctx.check_arg_count(1)
    tenant = ctx.resolve_tenant(ctx.args.tenant)
    ref = ctx.find_project(tenant, name)
    config = ctx.config
    if ctx.args.tenant:
        config = config.with_tenant(tenant)
    ctx.save_config(config.with_project(ref))
    if ctx.formatter.format is OutputFormat.TABLE:
        console.print(f"Project set to '{ref.name}'")
    return exit_codes.SUCCESS


def list_projects(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    tenant = ctx.resolve_tenant(ctx.args.tenant)
    client = ctx.client
    projects = ctx.collect(client.tenants.list_projects(tenant.id), client.projects.pages)
    ctx.formatter.emit_list(
        projects,
        ("ID", "Name", "Quota (key:limit:usage:unit)"),
        lambda p: (p.id, p.name, quota_to_string(p.quota)),
        script_row=lambda p: (p.id, p.name),
    )
    return exit_codes.SUCCESS


def project_tasks(ctx: CommandContext) -> int:
    (project_id,) = ctx.check_arg_count(1)
    client = ctx.client
    page = client.projects.list_tasks(project_id, state=ctx.args.state, kind=ctx.args.kind)
    return render_tasks(ctx, ctx.collect(page, client.tasks.pages))


def set_security_groups(ctx: CommandContext) -> int:
    project_id, groups = ctx.check_arg_count(2)
    names = tuple(split_list(groups))
    if not names:
        raise ValidationError("Please provide at least one security group.")
    client = ctx.client
    ctx.wait_and_show(client.projects.set_security_groups(project_id, names), client.projects.get)
    return exit_codes.SUCCESS


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "project", "Options for project")

    parser = add_verb(verbs, "create", create_project, "Create a new project", usage_args="<name>")
    parser.add_argument("-t", "--tenant", default="", help="Tenant name (defaults to the selected tenant)")
    parser.add_argument("-l", "--limits", default="", help="Comma separated '<key> <value> <unit>' limits")
    parser.add_argument("-p", "--percent", default="", help="Percentage of the tenant quota to allocate")
    parser.add_argument("-g", "--security-groups", default="", help="Comma separated security groups")
    parser.add_argument(
        "-c",
        "--default-router-private-ip-cidr",
        default=DEFAULT_ROUTER_PRIVATE_IP_CIDR,
        help=f"Private IP range of the default router (default {DEFAULT_ROUTER_PRIVATE_IP_CIDR})",
    )
    add_verb(verbs, "delete", delete_project, "Delete a project", usage_args="<project-id>")
    add_verb(verbs, "show", show_project, "Show project info", usage_args="<project-id>")
    add_verb(verbs, "get", get_project, "Show the default project")
    parser = add_verb(verbs, "set", set_project, "Select the default project", usage_args="<name>")
    parser.add_argument("-t", "--tenant", default="", help="Tenant name (defaults to the selected tenant)")
    parser = add_verb(verbs, "list", list_projects, "List projects of a tenant")
    parser.add_argument("-t", "--tenant", default="", help="Tenant name (defaults to the selected tenant)")
    parser = add_verb(verbs, "tasks", project_tasks, "List project tasks", usage_args="<project-id>")
    parser.add_argument("-s", "--state", default="", help="Filter by task state")
    parser.add_argument("-k", "--kind", default="", help="Filter by entity kind")
    add_verb(
        verbs,
        "set-security-groups",
        set_security_groups,
        "Replace the security groups of a project",
        usage_args="<project-id> <groups>",
    )
    add_iam_commands(verbs, "project", lambda client: client.projects)
