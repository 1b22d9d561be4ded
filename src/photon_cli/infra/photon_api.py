"""Resource-level API of the controller, built on :class:`RestClient`.

Each resource class groups the verbs of one REST collection and returns
parsed models from :mod:`photon_cli.core.models`.  Mutating verbs return
the :class:`~photon_cli.core.models.Task` the server created; list verbs
return only the *first* :class:`~photon_cli.core.models.Page`; callers
hand it to :func:`photon_cli.core.pagination.collect_all` together with
the resource's :attr:`pages` fetcher.

This layer never waits on tasks and never follows links on its own.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Generic, TypeVar

from photon_cli.core import parsing
from photon_cli.core.models import (
    VM,
    Cluster,
    Deployment,
    Host,
    IamEntry,
    Image,
    Page,
    Project,
    QuotaStatus,
    Subnet,
    SystemInfo,
    SystemStatus,
    Task,
    Tenant,
)
from photon_cli.core.specs import (
    AvailabilityZoneCreateSpec,
    ClusterCreateSpec,
    DeploymentCreateSpec,
    HostCreateSpec,
    ImageCreateSpec,
    PhysicalSubnetCreateSpec,
    PolicyDelta,
    ProjectCreateSpec,
    TenantCreateSpec,
    VirtualSubnetCreateSpec,
)
from photon_cli.exceptions import TransportError, ValidationError
from photon_cli.infra.rest_client import RestClient

T = TypeVar("T")

ROOT: str = "/v1"


def _as_dict(body: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(body, dict):
        raise TransportError(f"Unexpected response shape for {what}.")
    return body


class LinkedPageFetcher(Generic[T]):
    """Concrete :class:`~photon_cli.core.protocols.PageFetcher` for one model."""

    def __init__(self, rest: RestClient, parse_item: Callable[[Mapping[str, Any]], T]) -> None:
        self._rest = rest
        self._parse_item = parse_item

    def get_page(self, link: str) -> Page[T]:
        return parsing.parse_page(_as_dict(self._rest.get(link), "page"), self._parse_item)


class _Resource(Generic[T]):
    """Shared plumbing: a REST client plus the page parser for ``T``."""

    parse_item: Callable[[Mapping[str, Any]], T]

    def __init__(self, rest: RestClient) -> None:
        self._rest = rest
        self.pages: LinkedPageFetcher[T] = LinkedPageFetcher(rest, type(self).parse_item)

    def _page(self, path: str, params: Mapping[str, str] | None = None) -> Page[T]:
        body = _as_dict(self._rest.get(path, params), path)
        return parsing.parse_page(body, type(self).parse_item)

    def _task(self, method: str, path: str, payload: Any = None) -> Task:
        if method == "DELETE":
            body = self._rest.delete(path)
        else:
            body = self._rest.post(path, payload)
        return parsing.parse_task(_as_dict(body, path))

    def _task_page(self, path: str, state: str = "", kind: str = "") -> Page[Task]:
        body = _as_dict(self._rest.get(path, {"state": state, "kind": kind}), path)
        return parsing.parse_page(body, parsing.parse_task)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class TasksApi(_Resource[Task]):
    parse_item = staticmethod(parsing.parse_task)

    def get(self, task_id: str) -> Task:
        return parsing.parse_task(_as_dict(self._rest.get(f"{ROOT}/tasks/{task_id}"), "task"))

    def list(self, *, entity_id: str = "", entity_kind: str = "", state: str = "") -> Page[Task]:
        return self._page(
            f"{ROOT}/tasks",
            {"entityId": entity_id, "entityKind": entity_kind, "state": state},
        )


# ---------------------------------------------------------------------------
# Tenancy
# ---------------------------------------------------------------------------

class TenantsApi(_Resource[Tenant]):
    parse_item = staticmethod(parsing.parse_tenant)

    def list(self, *, name: str = "") -> Page[Tenant]:
        return self._page(f"{ROOT}/tenants", {"name": name})

    def get(self, tenant_id: str) -> Tenant:
        return parsing.parse_tenant(_as_dict(self._rest.get(f"{ROOT}/tenants/{tenant_id}"), "tenant"))

    def create(self, spec: TenantCreateSpec) -> Task:
        return self._task("POST", f"{ROOT}/tenants", spec.to_payload())

    def delete(self, tenant_id: str) -> Task:
        return self._task("DELETE", f"{ROOT}/tenants/{tenant_id}")

    def get_quota(self, tenant_id: str) -> tuple[QuotaStatus, ...]:
        body = _as_dict(self._rest.get(f"{ROOT}/tenants/{tenant_id}/quota"), "quota")
        return parsing.parse_quota(body)

    def create_project(self, tenant_id: str, spec: ProjectCreateSpec) -> Task:
        return self._task("POST", f"{ROOT}/tenants/{tenant_id}/projects", spec.to_payload())

    def list_projects(self, tenant_id: str, *, name: str = "") -> Page[Project]:
        body = _as_dict(
            self._rest.get(f"{ROOT}/tenants/{tenant_id}/projects", {"name": name}), "projects",
        )
        return parsing.parse_page(body, parsing.parse_project)

    def list_tasks(self, tenant_id: str, *, state: str = "") -> Page[Task]:
        return self._task_page(f"{ROOT}/tenants/{tenant_id}/tasks", state)


class ProjectsApi(_Resource[Project]):
    parse_item = staticmethod(parsing.parse_project)

    def get(self, project_id: str) -> Project:
        return parsing.parse_project(
            _as_dict(self._rest.get(f"{ROOT}/projects/{project_id}"), "project"),
        )

    def delete(self, project_id: str) -> Task:
        return self._task("DELETE", f"{ROOT}/projects/{project_id}")

    def list_tasks(self, project_id: str, *, state: str = "", kind: str = "") -> Page[Task]:
        return self._task_page(f"{ROOT}/projects/{project_id}/tasks", state, kind)

    def set_security_groups(self, project_id: str, groups: tuple[str, ...]) -> Task:
        return self._task(
            "POST", f"{ROOT}/projects/{project_id}/set_security_groups", {"items": list(groups)},
        )

    def get_iam(self, project_id: str) -> tuple[IamEntry, ...]:
        return parsing.parse_iam_policy(self._rest.get(f"{ROOT}/projects/{project_id}/iam"))

    def modify_iam(self, project_id: str, delta: PolicyDelta) -> Task:
        return self._task("POST", f"{ROOT}/projects/{project_id}/iam", [delta.to_payload()])


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

class ImagesApi(_Resource[Image]):
    parse_item = staticmethod(parsing.parse_image)

    def list(self, *, name: str = "") -> Page[Image]:
        return self._page(f"{ROOT}/images", {"name": name})

    def get(self, image_id: str) -> Image:
        return parsing.parse_image(_as_dict(self._rest.get(f"{ROOT}/images/{image_id}"), "image"))

    def create(self, spec: ImageCreateSpec) -> Task:
        """Upload an image file; project-scoped when ``spec.project_id`` is set."""
        path = (
            f"{ROOT}/projects/{spec.project_id}/images" if spec.project_id else f"{ROOT}/images"
        )
        file_path = Path(spec.file_path)
        data = {"name": spec.name}
        if spec.replication_type:
            data["ImageReplication"] = spec.replication_type
        try:
            with file_path.open("rb") as handle:
                body = self._rest.post(path, files={"file": (file_path.name, handle)}, data=data)
        except OSError as exc:
            raise ValidationError(f"Cannot read image file {file_path}: {exc}") from exc
        return parsing.parse_task(_as_dict(body, path))

    def delete(self, image_id: str) -> Task:
        return self._task("DELETE", f"{ROOT}/images/{image_id}")

    def list_tasks(self, image_id: str, *, state: str = "") -> Page[Task]:
        return self._task_page(f"{ROOT}/images/{image_id}/tasks", state)

    def get_iam(self, image_id: str) -> tuple[IamEntry, ...]:
        return parsing.parse_iam_policy(self._rest.get(f"{ROOT}/images/{image_id}/iam"))

    def modify_iam(self, image_id: str, delta: PolicyDelta) -> Task:
        return self._task("POST", f"{ROOT}/images/{image_id}/iam", [delta.to_payload()])


# ---------------------------------------------------------------------------
# Networking
# ---------------------------------------------------------------------------

class SubnetsApi(_Resource[Subnet]):
    """Physical networks live at ``/subnets``; virtual ones under projects."""

    parse_item = staticmethod(parsing.parse_subnet)

    def list(self, *, name: str = "") -> Page[Subnet]:
        return self._page(f"{ROOT}/subnets", {"name": name})

    def list_for_project(self, project_id: str, *, name: str = "") -> Page[Subnet]:
        return self._page(f"{ROOT}/projects/{project_id}/subnets", {"name": name})

    def get(self, subnet_id: str) -> Subnet:
        return parsing.parse_subnet(_as_dict(self._rest.get(f"{ROOT}/subnets/{subnet_id}"), "subnet"))

    def create(self, spec: PhysicalSubnetCreateSpec) -> Task:
        return self._task("POST", f"{ROOT}/subnets", spec.to_payload())

    def create_virtual(self, spec: VirtualSubnetCreateSpec) -> Task:
        return self._task("POST", f"{ROOT}/projects/{spec.project_id}/subnets", spec.to_payload())

    def delete(self, subnet_id: str) -> Task:
        return self._task("DELETE", f"{ROOT}/subnets/{subnet_id}")

    def set_default(self, subnet_id: str) -> Task:
        return self._task("POST", f"{ROOT}/subnets/{subnet_id}/set_default")


# ---------------------------------------------------------------------------
# Compute
# ---------------------------------------------------------------------------

class ClustersApi(_Resource[Cluster]):
    parse_item = staticmethod(parsing.parse_cluster)

    def create(self, project_id: str, spec: ClusterCreateSpec) -> Task:
        return self._task("POST", f"{ROOT}/projects/{project_id}/clusters", spec.to_payload())

    def list_for_project(self, project_id: str) -> Page[Cluster]:
        return self._page(f"{ROOT}/projects/{project_id}/clusters")

    def get(self, cluster_id: str) -> Cluster:
        return parsing.parse_cluster(
            _as_dict(self._rest.get(f"{ROOT}/clusters/{cluster_id}"), "cluster"),
        )

    def delete(self, cluster_id: str) -> Task:
        return self._task("DELETE", f"{ROOT}/clusters/{cluster_id}")

    def resize(self, cluster_id: str, worker_count: int) -> Task:
        return self._task(
            "POST", f"{ROOT}/clusters/{cluster_id}/resize", {"newWorkerCount": worker_count},
        )

    def list_vms(self, cluster_id: str) -> Page[VM]:
        body = _as_dict(self._rest.get(f"{ROOT}/clusters/{cluster_id}/vms"), "vms")
        return parsing.parse_page(body, parsing.parse_vm)


class VmsApi(_Resource[VM]):
    parse_item = staticmethod(parsing.parse_vm)

    def get(self, vm_id: str) -> VM:
        return parsing.parse_vm(_as_dict(self._rest.get(f"{ROOT}/vms/{vm_id}"), "vm"))

    def get_networks(self, vm_id: str) -> Task:
        """Start a GET_NETWORKS task; its result lands in ``resource_properties``."""
        return parsing.parse_task(
            _as_dict(self._rest.get(f"{ROOT}/vms/{vm_id}/networks"), "vm networks"),
        )


class HostsApi(_Resource[Host]):
    parse_item = staticmethod(parsing.parse_host)

    BASE: str = f"{ROOT}/infrastructure/hosts"

    def create(self, spec: HostCreateSpec, *, deployment_id: str = "") -> Task:
        path = f"{ROOT}/deployments/{deployment_id}/hosts" if deployment_id else self.BASE
        return self._task("POST", path, spec.to_payload())

    def list(self) -> Page[Host]:
        return self._page(self.BASE)

    def get(self, host_id: str) -> Host:
        return parsing.parse_host(_as_dict(self._rest.get(f"{self.BASE}/{host_id}"), "host"))

    def delete(self, host_id: str) -> Task:
        return self._task("DELETE", f"{self.BASE}/{host_id}")

    def list_vms(self, host_id: str) -> Page[VM]:
        body = _as_dict(self._rest.get(f"{self.BASE}/{host_id}/vms"), "vms")
        return parsing.parse_page(body, parsing.parse_vm)

    def list_tasks(self, host_id: str, *, state: str = "") -> Page[Task]:
        return self._task_page(f"{self.BASE}/{host_id}/tasks", state)

    def set_availability_zone(self, host_id: str, zone_id: str) -> Task:
        return self._task(
            "POST",
            f"{self.BASE}/{host_id}/set_availability_zone",
            {"availabilityZoneId": zone_id},
        )

    def action(self, host_id: str, action: str) -> Task:
        """Run a state-change action such as ``suspend`` or ``provision``."""
        return self._task("POST", f"{self.BASE}/{host_id}/{action}")


class DeploymentsApi(_Resource[Deployment]):
    parse_item = staticmethod(parsing.parse_deployment)

    def list(self) -> Page[Deployment]:
        return self._page(f"{ROOT}/deployments")

    def get(self, deployment_id: str) -> Deployment:
        return parsing.parse_deployment(
            _as_dict(self._rest.get(f"{ROOT}/deployments/{deployment_id}"), "deployment"),
        )

    def list_hosts(self, deployment_id: str) -> Page[Host]:
        body = _as_dict(self._rest.get(f"{ROOT}/deployments/{deployment_id}/hosts"), "hosts")
        return parsing.parse_page(body, parsing.parse_host)

    def list_vms(self, deployment_id: str) -> Page[VM]:
        body = _as_dict(self._rest.get(f"{ROOT}/deployments/{deployment_id}/vms"), "vms")
        return parsing.parse_page(body, parsing.parse_vm)

    def create(self, spec: DeploymentCreateSpec) -> Task:
        return self._task("POST", f"{ROOT}/deployments", spec.to_payload())

    def deploy(self, deployment_id: str) -> Task:
        """Install the control plane onto the hosts registered so far."""
        return self._task("POST", f"{ROOT}/deployments/{deployment_id}/deploy")

    def destroy(self, deployment_id: str) -> Task:
        return self._task("POST", f"{ROOT}/deployments/{deployment_id}/destroy")

    def delete(self, deployment_id: str) -> Task:
        return self._task("DELETE", f"{ROOT}/deployments/{deployment_id}")


class AvailabilityZonesApi:
    def __init__(self, rest: RestClient) -> None:
        self._rest = rest

    def create(self, spec: AvailabilityZoneCreateSpec) -> Task:
        body = self._rest.post(f"{ROOT}/availabilityzones", spec.to_payload())
        return parsing.parse_task(_as_dict(body, "availability zone"))


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------

class SystemApi:
    def __init__(self, rest: RestClient) -> None:
        self._rest = rest

    def status(self) -> SystemStatus:
        return parsing.parse_system_status(_as_dict(self._rest.get(f"{ROOT}/status"), "status"))

    def info(self) -> SystemInfo:
        return parsing.parse_system_info(_as_dict(self._rest.get(f"{ROOT}/info"), "info"))


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

class PhotonClient:
    """Entry point bundling every resource API over one :class:`RestClient`.

    One instance is built per command invocation and passed explicitly
    to handlers; nothing stores it globally.
    """

    def __init__(self, rest: RestClient) -> None:
        self.rest: RestClient = rest
        self.tasks = TasksApi(rest)
        self.tenants = TenantsApi(rest)
        self.projects = ProjectsApi(rest)
        self.images = ImagesApi(rest)
        self.subnets = SubnetsApi(rest)
        self.clusters = ClustersApi(rest)
        self.vms = VmsApi(rest)
        self.hosts = HostsApi(rest)
        self.deployments = DeploymentsApi(rest)
        self.availability_zones = AvailabilityZonesApi(rest)
        self.system = SystemApi(rest)
