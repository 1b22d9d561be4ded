"""Tests for the resource-level API facade over a mocked :class:`RestClient`.

Coverage:
* REST layout rooted at ``/v1``.
* Mutating verbs parse the returned task.
* List verbs return the first page only; ``pages`` follows links.
* Image upload opens the file and maps read errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from photon_cli.core.pagination import collect_all
from photon_cli.core.specs import (
    AuthSpec,
    AvailabilityZoneCreateSpec,
    ClusterCreateSpec,
    DeploymentCreateSpec,
    HostCreateSpec,
    ImageCreateSpec,
    PolicyDelta,
)
from photon_cli.exceptions import TransportError, ValidationError
from photon_cli.infra.photon_api import PhotonClient


def _task_body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"id": "task-1", "operation": "OP", "state": "QUEUED"}
    body.update(overrides)
    return body


@pytest.fixture()
def rest() -> MagicMock:
    return MagicMock(name="RestClient")


@pytest.fixture()
def api(rest: MagicMock) -> PhotonClient:
    return PhotonClient(rest)


class TestTasksAndPages:
    def test_get_task(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.get.return_value = _task_body(state="COMPLETED", entity={"kind": "vm", "id": "vm-1"})
        task = api.tasks.get("task-1")
        rest.get.assert_called_once_with("/v1/tasks/task-1")
        assert task.entity is not None and task.entity.id == "vm-1"

    def test_list_returns_first_page_and_pages_follow_links(
        self, api: PhotonClient, rest: MagicMock,
    ) -> None:
        rest.get.side_effect = [
            {"items": [{"id": "t1", "name": "a"}], "nextPageLink": "/v1/tenants?pageLink=2"},
            {"items": [{"id": "t2", "name": "b"}], "nextPageLink": ""},
        ]
        first = api.tenants.list(name="a")
        assert rest.get.call_count == 1
        tenants = collect_all(first, api.tenants.pages)
        assert [t.id for t in tenants] == ["t1", "t2"]
        assert rest.get.call_args.args == ("/v1/tenants?pageLink=2",)

    def test_non_mapping_body_is_transport_error(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.get.return_value = ["not", "a", "task"]
        with pytest.raises(TransportError):
            api.tasks.get("task-1")


class TestMutatingVerbs:
    def test_create_cluster(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body(operation="CREATE_CLUSTER")
        spec = ClusterCreateSpec(name="c1", type="KUBERNETES", worker_count=2, batch_size=1)
        task = api.clusters.create("p1", spec)
        path, payload = rest.post.call_args.args
        assert path == "/v1/projects/p1/clusters"
        assert payload["workerCount"] == 2
        assert payload["workerBatchExpansionSize"] == 1
        assert task.operation == "CREATE_CLUSTER"

    def test_delete_uses_http_delete(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.delete.return_value = _task_body()
        api.hosts.delete("h1")
        rest.delete.assert_called_once_with("/v1/infrastructure/hosts/h1")

    def test_resize(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body()
        api.clusters.resize("c1", 5)
        rest.post.assert_called_once_with("/v1/clusters/c1/resize", {"newWorkerCount": 5})

    def test_modify_iam_sends_delta_list(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body()
        api.projects.modify_iam("p1", PolicyDelta(principal="joe@x", action="ADD", role="owner"))
        rest.post.assert_called_once_with(
            "/v1/projects/p1/iam", [{"principal": "joe@x", "action": "ADD", "role": "owner"}],
        )

    def test_host_create_under_deployment(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body()
        api.hosts.create(HostCreateSpec(address="10.0.0.1", username="u", password="p"), deployment_id="d1")
        assert rest.post.call_args.args[0] == "/v1/deployments/d1/hosts"

    def test_deployment_destroy(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body()
        api.deployments.destroy("d1")
        assert rest.post.call_args.args[0] == "/v1/deployments/d1/destroy"

    def test_deployment_create_payload(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body(operation="CREATE_DEPLOYMENT")
        spec = DeploymentCreateSpec(
            image_datastores=("ds1",),
            ntp_endpoint="10.0.0.1",
            auth=AuthSpec(enabled=True, endpoint="10.0.0.2", port=443, tenant="photon"),
        )
        api.deployments.create(spec)
        path, payload = rest.post.call_args.args
        assert path == "/v1/deployments"
        assert payload["imageDatastores"] == ["ds1"]
        assert payload["ntpEndpoint"] == "10.0.0.1"
        assert "syslogEndpoint" not in payload
        assert payload["auth"]["enabled"] is True
        assert payload["auth"]["port"] == 443

    def test_deployment_deploy(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body(operation="PERFORM_DEPLOYMENT")
        api.deployments.deploy("d1")
        assert rest.post.call_args.args[0] == "/v1/deployments/d1/deploy"

    def test_availability_zone_create(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.post.return_value = _task_body(operation="CREATE_AVAILABILITY_ZONE")
        task = api.availability_zones.create(AvailabilityZoneCreateSpec(name="Zone1"))
        rest.post.assert_called_once_with("/v1/availabilityzones", {"name": "Zone1"})
        assert task.operation == "CREATE_AVAILABILITY_ZONE"


class TestImageUpload:
    def test_project_scoped_upload(self, api: PhotonClient, rest: MagicMock, tmp_path: Path) -> None:
        image = tmp_path / "disk.vmdk"
        image.write_bytes(b"data")
        rest.post.return_value = _task_body(operation="CREATE_IMAGE")

        api.images.create(ImageCreateSpec(str(image), "disk", "ON_DEMAND", project_id="p1"))

        call = rest.post.call_args
        assert call.args[0] == "/v1/projects/p1/images"
        assert call.kwargs["data"] == {"name": "disk", "ImageReplication": "ON_DEMAND"}
        assert call.kwargs["files"]["file"][0] == "disk.vmdk"

    def test_missing_file_is_validation_error(self, api: PhotonClient, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            api.images.create(ImageCreateSpec(str(tmp_path / "missing.vmdk"), "x"))


class TestSystem:
    def test_info_and_status(self, api: PhotonClient, rest: MagicMock) -> None:
        rest.get.side_effect = [
            {"networkType": "SOFTWARE_DEFINED"},
            {"status": "READY", "components": [{"component": "PHOTON_CONTROLLER", "status": "READY"}]},
        ]
        assert api.system.info().network_type == "SOFTWARE_DEFINED"
        status = api.system.status()
        assert status.components[0].component == "PHOTON_CONTROLLER"
        assert [c.args[0] for c in rest.get.call_args_list] == ["/v1/info", "/v1/status"]
