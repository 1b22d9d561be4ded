"""Quota limit parsing and rendering helpers (pure).

Limits are written on the command line as comma separated
``<key> <value> <unit>`` triples, for example::

    vm.count 100 COUNT, vm.memory 1000 GB
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from photon_cli.core.models import QuotaLineItem, QuotaStatus
from photon_cli.exceptions import ValidationError

VALID_UNITS: frozenset[str] = frozenset({"GB", "MB", "KB", "B", "COUNT"})

_SEPARATOR = re.compile(r"\s*,\s*")


def split_list(value: str) -> list[str]:
    """Split a comma separated flag value, dropping empty entries."""
    return [part for part in _SEPARATOR.split(value.strip()) if part]


def parse_limits(value: str) -> tuple[QuotaLineItem, ...]:
    """Parse a ``--limits`` flag value.

    Raises
    ------
    ValidationError
        If a triple is malformed, its value is not numeric, or its unit
        is not one of :data:`VALID_UNITS`.
    """
    items: list[QuotaLineItem] = []
    for entry in split_list(value):
        parts = entry.split()
        if len(parts) != 3:
            raise ValidationError(
                f"Invalid limit '{entry}'.",
                hint="Each limit must be written as '<key> <value> <unit>'.",
            )
        key, raw_value, unit = parts
        try:
            number = float(raw_value)
        except ValueError as exc:
            raise ValidationError(f"Invalid limit value '{raw_value}' for {key}.") from exc
        unit = unit.upper()
        if unit not in VALID_UNITS:
            raise ValidationError(
                f"Invalid unit '{unit}' for {key}.",
                hint=f"Valid units: {', '.join(sorted(VALID_UNITS))}",
            )
        items.append(QuotaLineItem(key=key, value=number, unit=unit))
    return tuple(items)


def limits_to_quota_spec(limits: Sequence[QuotaLineItem]) -> dict[str, dict[str, object]]:
    """Convert requested limits to the ``quotaLineItems`` wire mapping."""
    return {
        item.key: {"limit": item.value, "usage": 0.0, "unit": item.unit} for item in limits
    }


def subdivide_quota(
    tenant_quota: Sequence[QuotaStatus],
    fraction: float,
) -> dict[str, dict[str, object]]:
    """Scale every tenant limit by *fraction* (0.0–1.0) for a new project."""
    return {
        item.key: {"limit": item.limit * fraction, "usage": 0.0, "unit": item.unit}
        for item in tenant_quota
    }


def quota_to_string(quota: Sequence[QuotaStatus]) -> str:
    """Render quota as ``key:limit:usage:unit`` pairs for script output."""
    return ",".join(f"{q.key}:{q.limit:g}:{q.usage:g}:{q.unit}" for q in quota)
