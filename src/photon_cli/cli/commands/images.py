"""``photon image``: upload and manage VM images."""

from __future__ import annotations

import os
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import (
    add_iam_commands,
    add_noun,
    add_verb,
    cancelled,
    render_tasks,
)
from photon_cli.cli.context import CommandContext
from photon_cli.core.models import Image
from photon_cli.core.specs import ImageCreateSpec
from photon_cli.exceptions import ValidationError

REPLICATION_TYPES: tuple[str, ...] = ("EAGER", "ON_DEMAND")
PROJECT_SCOPE: str = "project"
INFRASTRUCTURE_SCOPES: tuple[str, ...] = ("infrastructure", "infra")


def _image_scope(ctx: CommandContext) -> str:
    """Return the owning project id, or ``""`` for an infrastructure image.

    Interactive runs ask for the scope, defaulting to ``project``; a
    project-scoped image without ``--project-id`` falls back to the
    selected project and then to a prompt for its id.
    """
    scope = ctx.args.scope or ""
    if not ctx.non_interactive:
        scope = ctx.ask(f"Image scope (default: {PROJECT_SCOPE}): ", scope) or PROJECT_SCOPE
    scope = scope.lower()

    if scope in INFRASTRUCTURE_SCOPES:
        if ctx.args.project_id:
            raise ValidationError("--project-id cannot be used with an infrastructure image.")
        return ""
    if scope and scope != PROJECT_SCOPE:
        raise ValidationError(
            f"Invalid image scope '{scope}'.",
            hint="Use 'project', 'infrastructure' or 'infra'.",
        )
    if ctx.args.project_id:
        return ctx.args.project_id
    if scope != PROJECT_SCOPE:
        return ""
    if ctx.config.project is None and not ctx.non_interactive:
        return ctx.require(ctx.ask("Project ID: "), "a project ID")
    return ctx.resolve_project().id


def create_image(ctx: CommandContext) -> int:
    file_path = ctx.require(ctx.ask("Image file path: ", ctx.optional_arg()), "an image file path")
    if not os.path.isfile(file_path):
        raise ValidationError(f"Image file '{file_path}' does not exist.")

    name = ctx.ask("Image name: ", ctx.args.name) or os.path.basename(file_path)
    replication = ctx.ask("Image replication type (EAGER or ON_DEMAND): ", ctx.args.image_replication)
    replication = (replication or REPLICATION_TYPES[0]).upper()
    if replication not in REPLICATION_TYPES:
        raise ValidationError(
            f"Invalid image replication type '{replication}'.",
            hint="Use EAGER or ON_DEMAND.",
        )

    spec = ImageCreateSpec(
        file_path=file_path,
        name=name,
        replication_type=replication,
        project_id=_image_scope(ctx),
    )
    client = ctx.client
    ctx.wait_and_show(client.images.create(spec), client.images.get)
    return exit_codes.SUCCESS


def delete_image(ctx: CommandContext) -> int:
    (image_id,) = ctx.check_arg_count(1)
    if not ctx.confirmed(f"Delete image {image_id}?"):
        return cancelled()
    ctx.wait_for_task(ctx.client.images.delete(image_id))
    return exit_codes.SUCCESS


def list_images(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    client = ctx.client
    images = ctx.collect(client.images.list(name=ctx.args.name), client.images.pages)
    ctx.formatter.emit_list(
        images,
        ("ID", "Name", "State", "Size(Byte)", "Replication", "ReplicationProgress", "SeedingProgress"),
        lambda i: (
            i.id,
            i.name,
            i.state,
            i.size,
            i.replication_type,
            i.replication_progress,
            i.seeding_progress,
        ),
    )
    return exit_codes.SUCCESS


def show_image(ctx: CommandContext) -> int:
    (image_id,) = ctx.check_arg_count(1)
    image: Image = ctx.client.images.get(image_id)
    scope = f"{image.scope.kind} {image.scope.id}".strip() if image.scope is not None else ""
    settings = ",".join(f"{s.name}:{s.default_value}" for s in image.settings)
    ctx.formatter.emit_one(
        image,
        f"Image ID: {image.id}",
        [
            ("Name", image.name),
            ("State", image.state),
            ("Size", f"{image.size} Byte(s)"),
            ("Image Replication Type", image.replication_type),
            ("Image Replication Progress", image.replication_progress),
            ("Image Seeding Progress", image.seeding_progress),
            ("Scope", scope),
            ("Settings", settings),
        ],
        (
            image.id,
            image.name,
            image.state,
            image.size,
            image.replication_type,
            image.replication_progress,
            image.seeding_progress,
            settings,
        ),
    )
    return exit_codes.SUCCESS


def image_tasks(ctx: CommandContext) -> int:
    (image_id,) = ctx.check_arg_count(1)
    client = ctx.client
    page = client.images.list_tasks(image_id, state=ctx.args.state)
    return render_tasks(ctx, ctx.collect(page, client.tasks.pages))


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "image", "Options for image")

    parser = add_verb(verbs, "create", create_image, "Upload a new image", usage_args="<image-file>")
    parser.add_argument("-n", "--name", default="", help="Image name (defaults to the file name)")
    parser.add_argument(
        "-i", "--image_replication", dest="image_replication", default="",
        help="Image replication type: EAGER or ON_DEMAND",
    )
    parser.add_argument("-s", "--scope", default="", help="Image scope: project, infrastructure or infra")
    parser.add_argument("-p", "--project-id", default="", help="Project owning the image")
    add_verb(verbs, "delete", delete_image, "Delete an image", usage_args="<image-id>")
    parser = add_verb(verbs, "list", list_images, "List images")
    parser.add_argument("-n", "--name", default="", help="Filter by image name")
    add_verb(verbs, "show", show_image, "Show image info", usage_args="<image-id>")
    parser = add_verb(verbs, "tasks", image_tasks, "List image tasks", usage_args="<image-id>")
    parser.add_argument("-s", "--state", default="", help="Filter by task state")
    add_iam_commands(verbs, "image", lambda client: client.images)
