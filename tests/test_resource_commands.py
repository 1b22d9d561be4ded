"""Command tests for images, networks and tasks."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from photon_cli.cli import exit_codes
from photon_cli.core.models import Entity, Subnet, SystemInfo, TaskStep
from photon_cli.core.specs import ImageCreateSpec, PhysicalSubnetCreateSpec, VirtualSubnetCreateSpec
from photon_cli.exceptions import (
    TaskFailedError,
    UnknownTaskStateError,
    ValidationError,
)
from photon_cli.infra.config_store import ConfigStore

from factories import make_page, make_task


# ---------------------------------------------------------------------------
# image
# ---------------------------------------------------------------------------

@pytest.fixture()
def image_file(tmp_path: Path) -> Path:
    path = tmp_path / "photon.ova"
    path.write_bytes(b"\x00" * 16)
    return path


class TestImages:
    def test_create_infrastructure_image(
        self, client: MagicMock, run: Callable[..., int], image_file: Path,
    ) -> None:
        client.images.create.return_value = make_task("QUEUED", operation="CREATE_IMAGE")
        client.tasks.get.return_value = make_task(operation="CREATE_IMAGE", entity_kind="image")

        code = run("-n", "image", "create", str(image_file), "-i", "on_demand", "-s", "infra")

        assert code == exit_codes.SUCCESS
        client.images.create.assert_called_once_with(
            ImageCreateSpec(
                file_path=str(image_file),
                name="photon.ova",
                replication_type="ON_DEMAND",
                project_id="",
            ),
        )

    def test_project_scope_uses_selected_project(
        self, client: MagicMock, run: Callable[..., int], image_file: Path,
    ) -> None:
        client.images.create.return_value = make_task("QUEUED")
        client.tasks.get.return_value = make_task()

        run("-n", "image", "create", str(image_file), "-n", "base", "-s", "project")

        spec = client.images.create.call_args.args[0]
        assert spec.project_id == "project-a-id"
        assert spec.name == "base"
        assert spec.replication_type == "EAGER"

    def test_interactive_scope_defaults_to_selected_project(
        self,
        client: MagicMock,
        run: Callable[..., int],
        image_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        questions: list[str] = []

        def _ask(message: str, current: str = "", *, secret: bool = False) -> str:
            questions.append(message)
            return current

        monkeypatch.setattr("photon_cli.cli.prompts.ask_for_input", _ask)
        client.images.create.return_value = make_task("QUEUED")
        client.tasks.get.return_value = make_task()

        run("image", "create", str(image_file))

        assert "Image scope (default: project): " in questions
        assert client.images.create.call_args.args[0].project_id == "project-a-id"

    def test_interactive_project_scope_prompts_for_project_id(
        self,
        client: MagicMock,
        run: Callable[..., int],
        image_file: Path,
        config_store: ConfigStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        config_store.save(config_store.load().with_project(None))
        answers = {"Project ID: ": "p-typed"}
        monkeypatch.setattr(
            "photon_cli.cli.prompts.ask_for_input",
            lambda message, current="", *, secret=False: current or answers.get(message, ""),
        )
        client.images.create.return_value = make_task("QUEUED")
        client.tasks.get.return_value = make_task()

        run("image", "create", str(image_file))

        assert client.images.create.call_args.args[0].project_id == "p-typed"

    def test_interactive_infrastructure_answer(
        self,
        client: MagicMock,
        run: Callable[..., int],
        image_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        answers = {"Image scope (default: project): ": "infra"}
        monkeypatch.setattr(
            "photon_cli.cli.prompts.ask_for_input",
            lambda message, current="", *, secret=False: current or answers.get(message, ""),
        )
        client.images.create.return_value = make_task("QUEUED")
        client.tasks.get.return_value = make_task()

        run("image", "create", str(image_file))

        assert client.images.create.call_args.args[0].project_id == ""

    def test_missing_file(self, client: MagicMock, run: Callable[..., int], tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="does not exist"):
            run("-n", "image", "create", str(tmp_path / "nope.ova"))
        client.images.create.assert_not_called()

    @pytest.mark.parametrize(
        "flags",
        [("-i", "LAZY"), ("-s", "galaxy"), ("-s", "infra", "-p", "p1")],
    )
    def test_invalid_flags(
        self, client: MagicMock, run: Callable[..., int], image_file: Path, flags: tuple[str, ...],
    ) -> None:
        with pytest.raises(ValidationError):
            run("-n", "image", "create", str(image_file), *flags)
        client.images.create.assert_not_called()

    def test_list_filters_by_name(self, client: MagicMock, run: Callable[..., int]) -> None:
        client.images.list.return_value = make_page()
        run("-n", "image", "list", "-n", "photon")
        client.images.list.assert_called_once_with(name="photon")


# ---------------------------------------------------------------------------
# network
# ---------------------------------------------------------------------------

def _network_mode(client: MagicMock, network_type: str) -> None:
    client.system.info.return_value = SystemInfo(network_type=network_type)
    client.tasks.get.return_value = make_task(operation="CREATE_NETWORK", entity_kind="subnet")


class TestNetworks:
    def test_physical_create(self, client: MagicMock, run: Callable[..., int]) -> None:
        _network_mode(client, "PHYSICAL")
        client.subnets.create.return_value = make_task("QUEUED")

        run("-n", "network", "create", "-n", "net-1", "-d", "lab", "-p", "VM Network, pg2")

        client.subnets.create.assert_called_once_with(
            PhysicalSubnetCreateSpec(name="net-1", port_groups=("VM Network", "pg2"), description="lab"),
        )
        client.subnets.create_virtual.assert_not_called()

    def test_physical_create_needs_port_groups(
        self, client: MagicMock, run: Callable[..., int],
    ) -> None:
        _network_mode(client, "PHYSICAL")
        with pytest.raises(ValidationError, match="port groups"):
            run("-n", "network", "create", "-n", "net-1")

    def test_software_defined_create(self, client: MagicMock, run: Callable[..., int]) -> None:
        _network_mode(client, "SOFTWARE_DEFINED")
        client.subnets.create_virtual.return_value = make_task("QUEUED")

        run("-n", "subnet", "create", "-n", "net-2", "-r", "routed", "-s", "256", "-f", "8")

        client.subnets.create_virtual.assert_called_once_with(
            VirtualSubnetCreateSpec(
                name="net-2",
                project_id="project-a-id",
                routing_type="ROUTED",
                size=256,
                reserved_static_ip_size=8,
            ),
        )

    @pytest.mark.parametrize(
        "flags",
        [("-r", "BRIDGED", "-s", "8"), ("-r", "ISOLATED", "-s", "0"), ("-r", "ISOLATED", "-s", "8", "-f", "-1")],
    )
    def test_software_defined_validation(
        self, client: MagicMock, run: Callable[..., int], flags: tuple[str, ...],
    ) -> None:
        _network_mode(client, "SOFTWARE_DEFINED")
        with pytest.raises(ValidationError):
            run("-n", "network", "create", "-n", "net-2", *flags)
        client.subnets.create_virtual.assert_not_called()

    def test_missing_network_type(self, client: MagicMock, run: Callable[..., int]) -> None:
        _network_mode(client, "NOT_AVAILABLE")
        with pytest.raises(ValidationError, match="Network type is missing"):
            run("-n", "network", "list")

    def test_software_defined_list_is_project_scoped(
        self,
        client: MagicMock,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _network_mode(client, "SOFTWARE_DEFINED")
        client.subnets.list_for_project.return_value = make_page(
            Subnet(
                id="s1", name="net-2", state="READY", routing_type="ROUTED", cidr="192.168.1.0/24",
                low_ip_dynamic="192.168.1.10", high_ip_dynamic="192.168.1.200", size=256,
            ),
        )

        run("-n", "network", "list", "-i", "p7")

        client.subnets.list_for_project.assert_called_once_with("p7", name="")
        assert capsys.readouterr().out.split("\t")[7] == "192.168.1.10-192.168.1.200"

    def test_set_default(self, client: MagicMock, run: Callable[..., int]) -> None:
        _network_mode(client, "PHYSICAL")
        client.subnets.set_default.return_value = make_task("QUEUED")
        assert run("-n", "network", "set-default", "s1") == exit_codes.SUCCESS
        client.subnets.set_default.assert_called_once_with("s1")

    def test_delete(self, client: MagicMock, run: Callable[..., int]) -> None:
        _network_mode(client, "SOFTWARE_DEFINED")
        client.subnets.delete.return_value = make_task("QUEUED", operation="DELETE_NETWORK")
        assert run("-n", "network", "delete", "s1") == exit_codes.SUCCESS
        client.subnets.delete.assert_called_once_with("s1")

    @pytest.mark.parametrize(
        "argv",
        [("delete", "s1"), ("show", "s1"), ("set-default", "s1"), ("create", "-n", "net-1")],
    )
    def test_every_verb_needs_a_network_type(
        self, client: MagicMock, run: Callable[..., int], argv: tuple[str, ...],
    ) -> None:
        _network_mode(client, "NOT_AVAILABLE")
        with pytest.raises(ValidationError, match="Network type is missing"):
            run("-n", "network", *argv)
        client.subnets.delete.assert_not_called()
        client.subnets.set_default.assert_not_called()
        client.subnets.get.assert_not_called()
        client.tasks.get.assert_not_called()

    def test_show_physical_script_line(
        self,
        client: MagicMock,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _network_mode(client, "PHYSICAL")
        client.subnets.get.return_value = Subnet(
            id="s1", name="net-1", state="READY", port_groups=("pg1",), description="lab",
        )
        run("-n", "network", "show", "s1")
        fields = capsys.readouterr().out.rstrip("\n").split("\t")
        assert fields[:3] == ["s1", "net-1", "READY"]
        assert len(fields) == 6

    def test_show_software_defined_script_line(
        self,
        client: MagicMock,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        _network_mode(client, "SOFTWARE_DEFINED")
        client.subnets.get.return_value = Subnet(
            id="s2", name="net-2", state="READY", routing_type="ISOLATED", cidr="10.0.0.0/24",
            low_ip_dynamic="10.0.0.2", high_ip_dynamic="10.0.0.200", size=256,
        )
        run("-n", "network", "show", "s2")
        fields = capsys.readouterr().out.rstrip("\n").split("\t")
        assert fields[4] == "ISOLATED"
        assert fields[7] == "10.0.0.2-10.0.0.200"


# ---------------------------------------------------------------------------
# task
# ---------------------------------------------------------------------------

class TestTasks:
    def test_show_script_line(
        self,
        client: MagicMock,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        client.tasks.get.return_value = make_task(
            task_id="t1",
            operation="CREATE_VM",
            entity=Entity(kind="vm", id="vm-1"),
            start_time=1000,
            end_time=5000,
        )
        run("-n", "task", "show", "t1")
        assert capsys.readouterr().out == "t1\tCOMPLETED\tvm-1\tvm\tCREATE_VM\t1000\t5000\n"

    def test_show_table_lists_steps_in_sequence(
        self,
        client: MagicMock,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        client.tasks.get.return_value = make_task(
            steps=(
                TaskStep(operation="START_VM", state="QUEUED", sequence=2),
                TaskStep(operation="CREATE_VM", state="COMPLETED", sequence=1),
            ),
        )
        run("task", "show", "task-1")
        assert "CREATE_VM:COMPLETED,START_VM:QUEUED" in capsys.readouterr().out

    def test_list_passes_filters(self, client: MagicMock, run: Callable[..., int]) -> None:
        client.tasks.list.return_value = make_page()
        run("-n", "task", "list", "-e", "vm-1", "-k", "vm", "-s", "ERROR")
        client.tasks.list.assert_called_once_with(entity_id="vm-1", entity_kind="vm", state="ERROR")

    def test_wait_prints_entity(
        self,
        client: MagicMock,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        client.tasks.get.side_effect = [make_task("STARTED"), make_task(entity_id="vm-3")]
        assert run("-n", "task", "wait", "task-1") == exit_codes.SUCCESS
        assert capsys.readouterr().out == "vm-3\n"

    def test_wait_reports_completion_in_table_mode(
        self,
        client: MagicMock,
        run: Callable[..., int],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        client.tasks.get.return_value = make_task(operation="DELETE_VM", entity_kind="vm", entity_id="vm-3")
        run("task", "wait", "task-1")
        captured = capsys.readouterr()
        assert "DELETE_VM completed for 'vm' entity vm-3" in captured.err
        assert captured.out == ""

    def test_wait_on_failed_task(self, client: MagicMock, run: Callable[..., int]) -> None:
        client.tasks.get.return_value = make_task("ERROR", operation="DELETE_VM")
        with pytest.raises(TaskFailedError, match="DELETE_VM"):
            run("-n", "task", "wait", "task-1")

    def test_wait_on_unrecognized_state(self, client: MagicMock, run: Callable[..., int]) -> None:
        client.tasks.get.return_value = make_task("PAUSED")
        with pytest.raises(UnknownTaskStateError):
            run("-n", "task", "wait", "task-1")
        assert client.tasks.get.call_count == 1
