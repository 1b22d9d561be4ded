"""Shared wiring and rendering helpers for command modules.

Every command module exposes ``register(subparsers)`` which adds one
noun (``tenant``, ``cluster``, ...) with its verbs.  Each verb parser
collects positionals into ``args`` and stores its handler under
``handler``; :func:`photon_cli.cli.app.main` calls
``handler(ctx) -> int``.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.console import console
from photon_cli.cli.context import CommandContext
from photon_cli.core.models import VM, IamEntry, SecurityGroup, Task
from photon_cli.core.specs import PolicyDelta
from photon_cli.infra.photon_api import PhotonClient

Handler = Callable[[CommandContext], int]

TASK_HEADERS: tuple[str, ...] = ("ID", "Operation", "State", "Entity", "Start Time", "Duration")


def add_noun(
    subparsers: Any,
    name: str,
    help_text: str,
    *,
    aliases: Sequence[str] = (),
) -> Any:
    """Add a resource noun and return the sub-parsers for its verbs."""
    parser = subparsers.add_parser(name, help=help_text, description=help_text, aliases=list(aliases))
    verbs = parser.add_subparsers(dest="verb", metavar="<command>", title="commands")
    verbs.required = True
    return verbs


def add_verb(
    verbs: Any,
    name: str,
    handler: Handler,
    help_text: str,
    *,
    usage_args: str = "",
) -> argparse.ArgumentParser:
    """Add a verb whose positionals are arity-checked by the handler."""
    parser = verbs.add_parser(name, help=help_text, description=help_text)
    if usage_args:
        parser.add_argument("args", nargs="*", metavar=usage_args)
    else:
        parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    parser.set_defaults(handler=handler)
    return parser


def cancelled() -> int:
    console.print("OK. Canceled")
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------

def format_timestamp(millis: int | None) -> str:
    if not millis:
        return ""
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M:%S")


def task_duration(task: Task) -> str:
    if not task.start_time or not task.end_time:
        return ""
    seconds = (task.end_time - task.start_time) // 1000
    return f"{seconds // 3600:02d}:{seconds % 3600 // 60:02d}:{seconds % 60:02d}"


def entity_label(task: Task) -> str:
    if task.entity is None:
        return ""
    return f"{task.entity.kind} {task.entity.id}".strip()


def security_groups_to_string(groups: Sequence[SecurityGroup]) -> str:
    return ",".join(f"{g.name}:{'true' if g.inherited else 'false'}" for g in groups)


def render_tasks(ctx: CommandContext, tasks: Sequence[Task]) -> int:
    """List tasks in the current output mode."""
    ctx.formatter.emit_list(
        tasks,
        TASK_HEADERS,
        lambda t: (
            t.id,
            t.operation,
            t.raw_state,
            entity_label(t),
            format_timestamp(t.start_time),
            task_duration(t),
        ),
        script_row=lambda t: (t.id, t.raw_state, t.operation, t.start_time, t.end_time),
    )
    return exit_codes.SUCCESS


def render_vms(ctx: CommandContext, vms: Sequence[VM]) -> int:
    ctx.formatter.emit_list(
        vms,
        ("ID", "Name", "State", "Flavor", "Host", "Datastore"),
        lambda v: (v.id, v.name, v.state, v.flavor, v.host, v.datastore),
        script_row=lambda v: (v.id, v.name, v.state),
    )
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# IAM verbs (shared by project and image)
# ---------------------------------------------------------------------------

def add_iam_commands(verbs: Any, noun: str, resource: Callable[[PhotonClient], Any]) -> None:
    """Register ``<noun> iam show|add|remove <id>``.

    *resource* picks the API object exposing ``get_iam`` and ``modify_iam``.
    """
    iam = verbs.add_parser("iam", help=f"Manage the IAM policy of a {noun}")
    actions = iam.add_subparsers(dest="iam_action", metavar="<action>")
    actions.required = True

    def show(ctx: CommandContext) -> int:
        (entity_id,) = ctx.check_arg_count(1)
        entries: tuple[IamEntry, ...] = resource(ctx.client).get_iam(entity_id)
        ctx.formatter.emit_list(
            entries,
            ("Principal", "Roles"),
            lambda e: (e.principal, e.roles),
        )
        return exit_codes.SUCCESS

    def modify(action: str) -> Handler:
        def handler(ctx: CommandContext) -> int:
            (entity_id,) = ctx.check_arg_count(1)
            principal = ctx.require(
                ctx.ask("Principal: ", ctx.args.principal or ""), "a principal",
            )
            role = ctx.require(ctx.ask("Role: ", ctx.args.role or ""), "a role")
            api = resource(ctx.client)
            task = api.modify_iam(entity_id, PolicyDelta(principal=principal, action=action, role=role))
            ctx.wait_and_show(task, api.get_iam)
            return exit_codes.SUCCESS

        return handler

    add_verb(actions, "show", show, f"Show the IAM policy of a {noun}", usage_args=f"<{noun}-id>")
    for name, action, text in (
        ("add", "ADD", f"Grant a role on a {noun}"),
        ("remove", "REMOVE", f"Revoke a role on a {noun}"),
    ):
        parser = add_verb(actions, name, modify(action), text, usage_args=f"<{noun}-id>")
        parser.add_argument("-p", "--principal", default="", help="User or group, e.g. joe@example.com")
        parser.add_argument("-r", "--role", default="", help="Role name, e.g. owner or contributor")
