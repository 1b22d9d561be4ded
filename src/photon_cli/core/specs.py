"""Typed request objects built by command handlers.

Handlers fill one of these from flags or interactive prompts *before*
any network call.  :meth:`to_payload` produces the camelCase JSON body
the controller expects; nothing else here performs I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_ROUTER_PRIVATE_IP_CIDR: str = "192.168.0.0/16"


@dataclass(frozen=True, slots=True)
class TenantCreateSpec:
    name: str
    security_groups: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name}
        if self.security_groups:
            payload["securityGroups"] = list(self.security_groups)
        return payload


@dataclass(frozen=True, slots=True)
class ProjectCreateSpec:
    """Project creation request.

    ``quota_line_items`` is already in wire shape (see
    :func:`photon_cli.core.quota.limits_to_quota_spec`).
    """

    name: str
    quota_line_items: Mapping[str, Mapping[str, object]] = field(default_factory=dict)
    security_groups: tuple[str, ...] = ()
    default_router_private_ip_cidr: str = DEFAULT_ROUTER_PRIVATE_IP_CIDR

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "defaultRouterPrivateIpCidr": self.default_router_private_ip_cidr,
            "resourceQuota": {
                "quotaLineItems": {k: dict(v) for k, v in self.quota_line_items.items()},
            },
        }
        if self.security_groups:
            payload["securityGroups"] = list(self.security_groups)
        return payload


@dataclass(frozen=True, slots=True)
class PolicyDelta:
    """Grant (``ADD``) or revoke (``REMOVE``) a role for a principal."""

    principal: str
    action: str
    role: str

    def to_payload(self) -> dict[str, Any]:
        return {"principal": self.principal, "action": self.action, "role": self.role}


@dataclass(frozen=True, slots=True)
class ImageCreateSpec:
    file_path: str
    name: str
    replication_type: str = ""
    project_id: str = ""


@dataclass(frozen=True, slots=True)
class PhysicalSubnetCreateSpec:
    name: str
    port_groups: tuple[str, ...]
    description: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "portGroups": list(self.port_groups),
        }


@dataclass(frozen=True, slots=True)
class VirtualSubnetCreateSpec:
    name: str
    project_id: str
    routing_type: str
    size: int
    reserved_static_ip_size: int = 0
    description: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "routingType": self.routing_type,
            "size": self.size,
            "reservedStaticIpSize": self.reserved_static_ip_size,
        }


@dataclass(frozen=True, slots=True)
class ClusterCreateSpec:
    name: str
    type: str
    worker_count: int
    vm_flavor: str = ""
    disk_flavor: str = ""
    network_id: str = ""
    batch_size: int = 0
    extended_properties: Mapping[str, str] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "workerCount": self.worker_count,
            "extendedProperties": dict(self.extended_properties),
        }
        if self.vm_flavor:
            payload["vmFlavor"] = self.vm_flavor
        if self.disk_flavor:
            payload["diskFlavor"] = self.disk_flavor
        if self.network_id:
            payload["vmNetworkId"] = self.network_id
        if self.batch_size > 0:
            payload["workerBatchExpansionSize"] = self.batch_size
        return payload


@dataclass(frozen=True, slots=True)
class HostCreateSpec:
    address: str
    username: str
    password: str
    tags: tuple[str, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    availability_zone: str = ""

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "address": self.address,
            "username": self.username,
            "password": self.password,
            "usageTags": list(self.tags),
            "metadata": dict(self.metadata),
        }
        if self.availability_zone:
            payload["availabilityZone"] = self.availability_zone
        return payload


@dataclass(frozen=True, slots=True)
class AuthSpec:
    enabled: bool = False
    endpoint: str = ""
    port: int = 0
    tenant: str = ""
    username: str = ""
    password: str = ""
    security_groups: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        if not self.enabled:
            return {"enabled": False}
        return {
            "enabled": True,
            "endpoint": self.endpoint,
            "port": self.port,
            "tenant": self.tenant,
            "username": self.username,
            "password": self.password,
            "securityGroups": list(self.security_groups),
        }


@dataclass(frozen=True, slots=True)
class DeploymentCreateSpec:
    image_datastores: tuple[str, ...]
    syslog_endpoint: str = ""
    ntp_endpoint: str = ""
    use_image_datastore_for_vms: bool = False
    loadbalancer_enabled: bool = True
    auth: AuthSpec = field(default_factory=AuthSpec)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "imageDatastores": list(self.image_datastores),
            "useImageDatastoreForVms": self.use_image_datastore_for_vms,
            "loadBalancerEnabled": self.loadbalancer_enabled,
            "auth": self.auth.to_payload(),
        }
        if self.syslog_endpoint:
            payload["syslogEndpoint"] = self.syslog_endpoint
        if self.ntp_endpoint:
            payload["ntpEndpoint"] = self.ntp_endpoint
        return payload


@dataclass(frozen=True, slots=True)
class AvailabilityZoneCreateSpec:
    name: str

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name}
