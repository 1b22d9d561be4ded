"""Raw-dict → domain-model parsers (pure).

The controller speaks camelCase JSON.  Every function here accepts the
decoded payload of one object and returns the matching frozen model from
:mod:`photon_cli.core.models`.  Missing keys fall back to neutral
defaults; parsers never raise on absent optional fields.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from photon_cli.core.models import (
    VM,
    ApiError,
    Cluster,
    ComponentStatus,
    Deployment,
    Entity,
    Host,
    IamEntry,
    Image,
    ImageScope,
    ImageSetting,
    Page,
    Project,
    QuotaStatus,
    SecurityGroup,
    Subnet,
    SystemInfo,
    SystemStatus,
    Task,
    TaskState,
    TaskStep,
    Tenant,
)

T = TypeVar("T")

_KNOWN_STATES: dict[str, TaskState] = {
    state.value: state for state in TaskState if state is not TaskState.UNRECOGNIZED
}


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _str(raw: Mapping[str, Any], key: str, default: str = "") -> str:
    value = raw.get(key)
    return default if value is None else str(value)


def _int_or_none(raw: Mapping[str, Any], key: str) -> int | None:
    value = raw.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _str_tuple(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value)


def _dicts(value: object) -> list[dict[str, Any]]:
    """Return the dict entries of *value*, skipping malformed ones."""
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def parse_task_state(value: str) -> TaskState:
    """Map a server state string onto :class:`TaskState`.

    Matching is exact; anything unknown becomes ``UNRECOGNIZED``.
    """
    return _KNOWN_STATES.get(value, TaskState.UNRECOGNIZED)


def parse_api_errors(value: object) -> tuple[ApiError, ...]:
    return tuple(
        ApiError(code=_str(entry, "code"), message=_str(entry, "message"))
        for entry in _dicts(value)
    )


def parse_task(raw: Mapping[str, Any]) -> Task:
    """Convert a raw task payload into a :class:`Task`."""
    raw_state = _str(raw, "state")
    raw_entity = raw.get("entity")
    entity: Entity | None = None
    if isinstance(raw_entity, dict) and raw_entity.get("id"):
        entity = Entity(kind=_str(raw_entity, "kind"), id=_str(raw_entity, "id"))

    steps = tuple(
        TaskStep(
            operation=_str(step, "operation"),
            state=_str(step, "state"),
            sequence=_int_or_none(step, "sequence") or 0,
            errors=parse_api_errors(step.get("errors")),
        )
        for step in _dicts(raw.get("steps"))
    )

    properties = raw.get("resourceProperties")
    return Task(
        id=_str(raw, "id"),
        operation=_str(raw, "operation"),
        state=parse_task_state(raw_state),
        raw_state=raw_state,
        entity=entity,
        start_time=_int_or_none(raw, "startedTime"),
        end_time=_int_or_none(raw, "endTime"),
        errors=parse_api_errors(raw.get("errors")),
        steps=steps,
        resource_properties=dict(properties) if isinstance(properties, dict) else None,
    )


def task_error_message(task: Task) -> str:
    """Summarise why *task* failed, preferring task-level errors over steps."""
    errors = list(task.errors)
    if not errors:
        for step in task.steps:
            errors.extend(step.errors)
    if not errors:
        return "no error details reported by the server"
    return "; ".join(
        f"{err.message} ({err.code})" if err.code else err.message for err in errors
    )


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------

def parse_page(raw: Mapping[str, Any], parse_item: Callable[[Mapping[str, Any]], T]) -> Page[T]:
    """Convert a raw list payload into a :class:`Page` of parsed items."""
    return Page(
        items=tuple(parse_item(entry) for entry in _dicts(raw.get("items"))),
        next_page_link=_str(raw, "nextPageLink"),
        previous_page_link=_str(raw, "previousPageLink"),
    )


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

def _parse_security_groups(value: object) -> tuple[SecurityGroup, ...]:
    return tuple(
        SecurityGroup(name=_str(entry, "name"), inherited=bool(entry.get("inherited")))
        for entry in _dicts(value)
    )


def parse_quota(raw: object) -> tuple[QuotaStatus, ...]:
    """Parse a ``resourceQuota`` object (``{"quotaLineItems": {key: {...}}}``)."""
    if not isinstance(raw, dict):
        return ()
    items = raw.get("quotaLineItems")
    if not isinstance(items, dict):
        return ()
    return tuple(
        QuotaStatus(
            key=str(key),
            limit=float(entry.get("limit") or 0.0),
            usage=float(entry.get("usage") or 0.0),
            unit=_str(entry, "unit"),
        )
        for key, entry in sorted(items.items())
        if isinstance(entry, dict)
    )


def parse_tenant(raw: Mapping[str, Any]) -> Tenant:
    return Tenant(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        security_groups=_parse_security_groups(raw.get("securityGroups")),
    )


def parse_project(raw: Mapping[str, Any]) -> Project:
    return Project(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        quota=parse_quota(raw.get("resourceQuota")),
        security_groups=_parse_security_groups(raw.get("securityGroups")),
    )


def parse_iam_policy(raw: object) -> tuple[IamEntry, ...]:
    return tuple(
        IamEntry(principal=_str(entry, "principal"), roles=_str_tuple(entry.get("roles")))
        for entry in _dicts(raw)
    )


def parse_image(raw: Mapping[str, Any]) -> Image:
    raw_scope = raw.get("scope")
    scope = (
        ImageScope(kind=_str(raw_scope, "kind"), id=_str(raw_scope, "id"))
        if isinstance(raw_scope, dict)
        else None
    )
    return Image(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        state=_str(raw, "state"),
        size=_int_or_none(raw, "size") or 0,
        replication_type=_str(raw, "replicationType"),
        replication_progress=_str(raw, "replicationProgress"),
        seeding_progress=_str(raw, "seedingProgress"),
        scope=scope,
        settings=tuple(
            ImageSetting(name=_str(entry, "name"), default_value=_str(entry, "defaultValue"))
            for entry in _dicts(raw.get("settings"))
        ),
    )


def parse_subnet(raw: Mapping[str, Any]) -> Subnet:
    port_groups = raw.get("portGroups")
    # Older controllers wrap the list as {"names": [...]}.
    if isinstance(port_groups, dict):
        port_groups = port_groups.get("names")
    return Subnet(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        state=_str(raw, "state"),
        description=_str(raw, "description"),
        is_default=bool(raw.get("isDefault")),
        port_groups=_str_tuple(port_groups),
        routing_type=_str(raw, "routingType"),
        cidr=_str(raw, "cidr"),
        low_ip_dynamic=_str(raw, "lowIpDynamic"),
        high_ip_dynamic=_str(raw, "highIpDynamic"),
        size=_int_or_none(raw, "size"),
        reserved_static_ip_size=_int_or_none(raw, "reservedStaticIpSize"),
    )


def parse_system_info(raw: Mapping[str, Any]) -> SystemInfo:
    return SystemInfo(
        network_type=_str(raw, "networkType", "NOT_AVAILABLE"),
        base_version=_str(raw, "baseVersion"),
        full_version=_str(raw, "fullVersion"),
    )


def parse_cluster(raw: Mapping[str, Any]) -> Cluster:
    props = raw.get("extendedProperties")
    return Cluster(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        type=_str(raw, "type"),
        state=_str(raw, "state"),
        worker_count=_int_or_none(raw, "workerCount") or 0,
        extended_properties=(
            {str(k): str(v) for k, v in props.items()} if isinstance(props, dict) else {}
        ),
    )


def parse_vm(raw: Mapping[str, Any]) -> VM:
    return VM(
        id=_str(raw, "id"),
        name=_str(raw, "name"),
        state=_str(raw, "state"),
        flavor=_str(raw, "flavor"),
        source_image_id=_str(raw, "sourceImageId"),
        host=_str(raw, "host"),
        datastore=_str(raw, "datastore"),
        tags=_str_tuple(raw.get("tags")),
    )


def parse_host(raw: Mapping[str, Any]) -> Host:
    metadata = raw.get("metadata")
    return Host(
        id=_str(raw, "id"),
        address=_str(raw, "address"),
        state=_str(raw, "state"),
        username=_str(raw, "username"),
        tags=_str_tuple(raw.get("usageTags")),
        metadata=(
            {str(k): str(v) for k, v in metadata.items()} if isinstance(metadata, dict) else {}
        ),
        availability_zone=_str(raw, "availabilityZone"),
        esx_version=_str(raw, "esxVersion"),
    )


def parse_deployment(raw: Mapping[str, Any]) -> Deployment:
    auth = raw.get("auth")
    return Deployment(
        id=_str(raw, "id"),
        state=_str(raw, "state"),
        image_datastores=_str_tuple(raw.get("imageDatastores")),
        syslog_endpoint=_str(raw, "syslogEndpoint"),
        ntp_endpoint=_str(raw, "ntpEndpoint"),
        use_image_datastore_for_vms=bool(raw.get("useImageDatastoreForVms")),
        auth_enabled=bool(auth.get("enabled")) if isinstance(auth, dict) else False,
        loadbalancer_enabled=bool(raw.get("loadBalancerEnabled")),
    )


def parse_system_status(raw: Mapping[str, Any]) -> SystemStatus:
    return SystemStatus(
        status=_str(raw, "status"),
        components=tuple(
            ComponentStatus(
                component=_str(entry, "component"),
                status=_str(entry, "status"),
                message=_str(entry, "message"),
            )
            for entry in _dicts(raw.get("components"))
        ),
    )
