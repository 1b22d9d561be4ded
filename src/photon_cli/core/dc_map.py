"""Deployment map ("dc map") interpretation (pure).

A deployment map describes a whole controller install: one ``deployment``
section and a list of ``hosts``.  Each host entry may cover several
machines through ``address_ranges``, for example::

    10.146.38.92-10.146.38.93,10.146.38.94

which expands to three hosts sharing the entry's credentials, tags,
metadata and availability zone.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from photon_cli.core.quota import split_list
from photon_cli.core.specs import AuthSpec, DeploymentCreateSpec, HostCreateSpec
from photon_cli.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class DeploymentMap:
    """A parsed deployment map.

    ``hosts`` carry availability zone *names*; the zones are created
    first and the names swapped for their ids before the hosts are.
    """

    deployment: DeploymentCreateSpec
    hosts: tuple[HostCreateSpec, ...]

    @property
    def availability_zones(self) -> tuple[str, ...]:
        """Zone names in first-use order, without duplicates."""
        names = (h.availability_zone for h in self.hosts if h.availability_zone)
        return tuple(dict.fromkeys(names))


def expand_address_ranges(value: str) -> list[str]:
    """Expand ``a-b,c`` style IPv4 ranges into single addresses, in order.

    Raises
    ------
    ValidationError
        If an address is malformed or a range runs backwards.
    """
    addresses: list[str] = []
    for entry in split_list(value):
        start_text, _, end_text = entry.partition("-")
        try:
            start = ipaddress.IPv4Address(start_text.strip())
            end = ipaddress.IPv4Address(end_text.strip()) if end_text else start
        except ValueError as exc:
            raise ValidationError(f"Invalid address range '{entry}'.") from exc
        if end < start:
            raise ValidationError(f"Address range '{entry}' ends before it starts.")
        addresses.extend(str(ipaddress.IPv4Address(n)) for n in range(int(start), int(end) + 1))
    return addresses


def _strings(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return tuple(split_list(str(value)))


def _section(raw: Mapping[str, Any], key: str) -> Any:
    if key not in raw or raw[key] is None:
        raise ValidationError(f"Deployment map has no '{key}' section.")
    return raw[key]


def parse_deployment(raw: Mapping[str, Any]) -> DeploymentCreateSpec:
    datastores = _strings(raw.get("image_datastores"))
    if not datastores:
        raise ValidationError("Deployment map must list image_datastores.")

    auth = AuthSpec()
    if raw.get("auth_enabled"):
        try:
            port = int(raw.get("oauth_port") or 0)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid oauth_port '{raw.get('oauth_port')}'.") from exc
        auth = AuthSpec(
            enabled=True,
            endpoint=str(raw.get("oauth_endpoint") or ""),
            port=port,
            tenant=str(raw.get("oauth_tenant") or ""),
            username=str(raw.get("oauth_username") or ""),
            password=str(raw.get("oauth_password") or ""),
            security_groups=_strings(raw.get("oauth_security_groups")),
        )

    return DeploymentCreateSpec(
        image_datastores=datastores,
        syslog_endpoint=str(raw.get("syslog_endpoint") or ""),
        ntp_endpoint=str(raw.get("ntp_endpoint") or ""),
        use_image_datastore_for_vms=bool(raw.get("use_image_datastore_for_vms", False)),
        loadbalancer_enabled=bool(raw.get("loadbalancer_enabled", True)),
        auth=auth,
    )


def parse_hosts(entries: object) -> tuple[HostCreateSpec, ...]:
    if not isinstance(entries, list):
        raise ValidationError("Deployment map 'hosts' must be a list.")

    hosts: list[HostCreateSpec] = []
    for index, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise ValidationError(f"Host entry {index} is not a mapping.")
        for key in ("address_ranges", "username", "password"):
            if not entry.get(key):
                raise ValidationError(f"Host entry {index} is missing '{key}'.")
        metadata = entry.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValidationError(f"Host entry {index} metadata must be a mapping.")

        for address in expand_address_ranges(str(entry["address_ranges"])):
            hosts.append(
                HostCreateSpec(
                    address=address,
                    username=str(entry["username"]),
                    password=str(entry["password"]),
                    tags=_strings(entry.get("usage_tags")),
                    metadata={str(k): str(v) for k, v in metadata.items()},
                    availability_zone=str(entry.get("availability_zone") or ""),
                ),
            )
    return tuple(hosts)


def parse_deployment_map(raw: object) -> DeploymentMap:
    """Build a :class:`DeploymentMap` from an already-loaded document."""
    if not isinstance(raw, dict):
        raise ValidationError("Deployment map must be a mapping.")
    deployment = _section(raw, "deployment")
    if not isinstance(deployment, dict):
        raise ValidationError("Deployment map 'deployment' section must be a mapping.")
    return DeploymentMap(
        deployment=parse_deployment(deployment),
        hosts=parse_hosts(_section(raw, "hosts")),
    )
