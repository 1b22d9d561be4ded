"""``photon task``: inspect and wait on asynchronous tasks."""

from __future__ import annotations

from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import (
    add_noun,
    add_verb,
    entity_label,
    format_timestamp,
    render_tasks,
    task_duration,
)
from photon_cli.cli.context import CommandContext
from photon_cli.core.models import Task
from photon_cli.core.parsing import task_error_message


def show_task(ctx: CommandContext) -> int:
    (task_id,) = ctx.check_arg_count(1)
    task: Task = ctx.client.tasks.get(task_id)
    steps = ",".join(f"{s.operation}:{s.state}" for s in sorted(task.steps, key=lambda s: s.sequence))
    errors = task_error_message(task) if task.errors else ""
    ctx.formatter.emit_one(
        task,
        f"Task: {task.id}",
        [
            ("Operation", task.operation),
            ("State", task.raw_state),
            ("Entity", entity_label(task)),
            ("Started", format_timestamp(task.start_time)),
            ("Ended", format_timestamp(task.end_time)),
            ("Duration", task_duration(task)),
            ("Steps", steps),
            ("Errors", errors),
        ],
        (
            task.id,
            task.raw_state,
            task.entity.id if task.entity else "",
            task.entity.kind if task.entity else "",
            task.operation,
            task.start_time,
            task.end_time,
        ),
    )
    return exit_codes.SUCCESS


def list_tasks(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    args = ctx.args
    client = ctx.client
    page = client.tasks.list(entity_id=args.entity_id, entity_kind=args.entity_kind, state=args.state)
    return render_tasks(ctx, ctx.collect(page, client.tasks.pages))


def wait_task(ctx: CommandContext) -> int:
    (task_id,) = ctx.check_arg_count(1)
    ctx.wait_for_task_id(task_id)
    return exit_codes.SUCCESS


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "task", "Options for task")

    add_verb(verbs, "show", show_task, "Show task info", usage_args="<task-id>")
    parser = add_verb(verbs, "list", list_tasks, "List tasks")
    parser.add_argument("-e", "--entity-id", default="", help="Filter by entity id")
    parser.add_argument("-k", "--entity-kind", default="", help="Filter by entity kind")
    parser.add_argument("-s", "--state", default="", help="Filter by task state")
    add_verb(verbs, "wait", wait_task, "Wait until a task finishes", usage_args="<task-id>")
