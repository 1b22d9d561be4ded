"""Domain models for photon-cli.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access.  Objects received from the controller are
never mutated; every model here is built once by
:mod:`photon_cli.core.parsing` and read thereafter.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class TaskState(str, Enum):
    """Closed set of task states understood by this client.

    Any string the server sends that is not listed here is mapped to
    :attr:`UNRECOGNIZED` so the poller can refuse to loop on it.
    """

    QUEUED = "QUEUED"
    STARTED = "STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"
    UNRECOGNIZED = "UNRECOGNIZED"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.ERROR)


@dataclass(frozen=True, slots=True)
class Entity:
    """Reference to the resource a task acts upon."""

    kind: str
    id: str


@dataclass(frozen=True, slots=True)
class ApiError:
    """A ``{code, message}`` error record reported by the controller."""

    code: str
    message: str


@dataclass(frozen=True, slots=True)
class TaskStep:
    operation: str
    state: str
    sequence: int
    errors: tuple[ApiError, ...] = ()


@dataclass(frozen=True, slots=True)
class Task:
    """Server-side handle to an asynchronous operation."""

    id: str
    """Opaque identifier assigned by the server."""

    operation: str
    """Operation name, e.g. ``CREATE_CLUSTER``."""

    state: TaskState
    """Parsed state; :attr:`TaskState.UNRECOGNIZED` for unknown strings."""

    raw_state: str
    """State string exactly as sent by the server."""

    entity: Entity | None
    """Resource the task acts upon, or ``None`` when not reported."""

    start_time: int | None = None
    end_time: int | None = None
    errors: tuple[ApiError, ...] = ()
    steps: tuple[TaskStep, ...] = ()
    resource_properties: Mapping[str, Any] | None = None
    """Free-form result payload (e.g. VM network connection info)."""


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    """One bounded slice of a server-side collection."""

    items: tuple[T, ...]
    next_page_link: str = ""
    """Continuation link; empty when the collection is exhausted."""

    previous_page_link: str = ""


# ---------------------------------------------------------------------------
# Tenancy
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SecurityGroup:
    name: str
    inherited: bool


@dataclass(frozen=True, slots=True)
class QuotaLineItem:
    """A requested quota limit, e.g. ``vm.memory 1000 GB``."""

    key: str
    value: float
    unit: str


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    """Limit and current usage of one quota key."""

    key: str
    limit: float
    usage: float
    unit: str


@dataclass(frozen=True, slots=True)
class Tenant:
    id: str
    name: str
    security_groups: tuple[SecurityGroup, ...] = ()


@dataclass(frozen=True, slots=True)
class Project:
    id: str
    name: str
    quota: tuple[QuotaStatus, ...] = ()
    security_groups: tuple[SecurityGroup, ...] = ()


@dataclass(frozen=True, slots=True)
class IamEntry:
    """Roles granted to one principal on a resource."""

    principal: str
    roles: tuple[str, ...]


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ImageScope:
    kind: str
    id: str


@dataclass(frozen=True, slots=True)
class ImageSetting:
    name: str
    default_value: str


@dataclass(frozen=True, slots=True)
class Image:
    id: str
    name: str
    state: str
    size: int
    replication_type: str
    replication_progress: str
    seeding_progress: str
    scope: ImageScope | None = None
    settings: tuple[ImageSetting, ...] = ()


# ---------------------------------------------------------------------------
# Networking
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Subnet:
    """A physical network or a software-defined (virtual) subnet.

    Physical networks populate ``port_groups``; virtual subnets populate
    the routing and addressing fields.
    """

    id: str
    name: str
    state: str
    description: str = ""
    is_default: bool = False
    port_groups: tuple[str, ...] = ()
    routing_type: str = ""
    cidr: str = ""
    low_ip_dynamic: str = ""
    high_ip_dynamic: str = ""
    size: int | None = None
    reserved_static_ip_size: int | None = None


@dataclass(frozen=True, slots=True)
class SystemInfo:
    network_type: str
    base_version: str = ""
    full_version: str = ""


# ---------------------------------------------------------------------------
# Compute
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Cluster:
    id: str
    name: str
    type: str
    state: str
    worker_count: int
    extended_properties: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class VM:
    id: str
    name: str
    state: str
    flavor: str = ""
    source_image_id: str = ""
    host: str = ""
    datastore: str = ""
    tags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Host:
    id: str
    address: str
    state: str
    username: str = ""
    tags: tuple[str, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    availability_zone: str = ""
    esx_version: str = ""


@dataclass(frozen=True, slots=True)
class Deployment:
    id: str
    state: str
    image_datastores: tuple[str, ...] = ()
    syslog_endpoint: str = ""
    ntp_endpoint: str = ""
    use_image_datastore_for_vms: bool = False
    auth_enabled: bool = False
    loadbalancer_enabled: bool = False


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ComponentStatus:
    component: str
    status: str
    message: str = ""


@dataclass(frozen=True, slots=True)
class SystemStatus:
    status: str
    components: tuple[ComponentStatus, ...] = ()
