"""Regression tests for optional CLI UI dependencies (rich/questionary).

These tests verify bootstrap commands and non-interactive output keep
working when optional UI packages are missing, and that prompting fails
cleanly only when a prompt is actually needed.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from photon_cli.cli import exit_codes
from photon_cli.cli.app import main
from photon_cli.core.models import Tenant
from photon_cli.exceptions import ConfigurationError

from factories import make_page, make_task


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("rich", "rich.console", "rich.table", "rich.text", "rich.progress", "rich.logging"):
        monkeypatch.setitem(sys.modules, name, None)


def _hide_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "questionary", None)


def test_help_works_without_rich_or_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_questionary(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_version_works_without_rich_or_questionary(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)
    _hide_questionary(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0


def test_table_falls_back_to_plain_columns_without_rich(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    client: MagicMock,
    run: Callable[..., int],
) -> None:
    _hide_rich(monkeypatch)
    client.tenants.list.return_value = make_page(Tenant(id="t1", name="acme"))

    assert run("tenant", "list") == exit_codes.SUCCESS
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["ID", "Name"]
    assert lines[1].split() == ["t1", "acme"]
    assert "Total: 1" in lines


def test_waiting_works_without_rich(
    monkeypatch: pytest.MonkeyPatch,
    client: MagicMock,
    run: Callable[..., int],
) -> None:
    _hide_rich(monkeypatch)
    client.tasks.get.return_value = make_task(operation="DELETE_CLUSTER")

    assert run("task", "wait", "task-1") == exit_codes.SUCCESS


def test_prompt_errors_cleanly_when_questionary_missing(
    monkeypatch: pytest.MonkeyPatch,
    run: Callable[..., int],
) -> None:
    _hide_questionary(monkeypatch)

    with pytest.raises(ConfigurationError, match="questionary is not installed"):
        run("tenant", "create", "acme")


def test_non_interactive_never_needs_questionary(
    monkeypatch: pytest.MonkeyPatch,
    client: MagicMock,
    run: Callable[..., int],
) -> None:
    _hide_questionary(monkeypatch)
    client.clusters.delete.return_value = make_task("QUEUED", operation="DELETE_CLUSTER")
    client.tasks.get.return_value = make_task(operation="DELETE_CLUSTER")

    assert run("-n", "cluster", "delete", "c1") == exit_codes.SUCCESS
