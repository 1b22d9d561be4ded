"""``photon target``: choose the controller endpoint and credentials."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from photon_cli.cli import exit_codes
from photon_cli.cli.commands.base import add_noun, add_verb
from photon_cli.cli.console import console, out
from photon_cli.cli.context import CommandContext
from photon_cli.cli.output import OutputFormat
from photon_cli.infra.config_store import CliConfig


def set_target(ctx: CommandContext) -> int:
    (endpoint,) = ctx.check_arg_count(1)
    endpoint = endpoint.rstrip("/")
    current = ctx.config
    if current.cloud_target == endpoint:
        config = replace(current, ignore_cert=ctx.args.nocertcheck)
    else:
        # A new controller invalidates the token and the tenant/project defaults.
        config = CliConfig(cloud_target=endpoint, ignore_cert=ctx.args.nocertcheck)
    ctx.save_config(config)

    if ctx.formatter.format is OutputFormat.TABLE:
        console.print(f"API target set to '{endpoint}'")
    return exit_codes.SUCCESS


def show_target(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    config = ctx.config
    if ctx.formatter.structured:
        ctx.formatter.document({"target": config.cloud_target, "ignore_cert": config.ignore_cert})
    elif ctx.formatter.format is OutputFormat.SCRIPT:
        out.write(config.cloud_target + "\n")
    elif config.cloud_target:
        console.print(f"Current target is '{config.cloud_target}'")
    else:
        console.print("No target set")
    return exit_codes.SUCCESS


def login(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    token = ctx.require(
        ctx.ask("Access token: ", ctx.args.access_token or "", secret=True), "an access token",
    )
    ctx.save_config(replace(ctx.config, token=token))
    if ctx.formatter.format is OutputFormat.TABLE:
        console.print("Login successful")
    return exit_codes.SUCCESS


def logout(ctx: CommandContext) -> int:
    ctx.check_arg_count(0)
    ctx.save_config(replace(ctx.config, token=""))
    if ctx.formatter.format is OutputFormat.TABLE:
        console.print("Logout successful")
    return exit_codes.SUCCESS


def register(subparsers: Any) -> None:
    verbs = add_noun(subparsers, "target", "Options for target", aliases=("t",))

    parser = add_verb(verbs, "set", set_target, "Set API target endpoint", usage_args="<endpoint>")
    parser.add_argument(
        "-c", "--nocertcheck", action="store_true", help="Skip TLS certificate verification",
    )
    add_verb(verbs, "show", show_target, "Show current target endpoint")
    parser = add_verb(verbs, "login", login, "Store an access token for the current target")
    parser.add_argument("-t", "--access-token", default="", help="OAuth access token")
    add_verb(verbs, "logout", logout, "Forget the stored access token")
