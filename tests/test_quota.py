"""Tests for quota limit parsing and rendering helpers (pure)."""

from __future__ import annotations

import pytest

from photon_cli.core.models import QuotaLineItem, QuotaStatus
from photon_cli.core.quota import (
    limits_to_quota_spec,
    parse_limits,
    quota_to_string,
    split_list,
    subdivide_quota,
)
from photon_cli.exceptions import ValidationError


class TestSplitList:
    def test_trims_spaces_around_commas(self) -> None:
        assert split_list(" a , b,c ") == ["a", "b", "c"]

    def test_empty_value(self) -> None:
        assert split_list("") == []


class TestParseLimits:
    def test_parses_triples(self) -> None:
        assert parse_limits("vm.count 10 COUNT, vm.memory 1.5 gb") == (
            QuotaLineItem(key="vm.count", value=10.0, unit="COUNT"),
            QuotaLineItem(key="vm.memory", value=1.5, unit="GB"),
        )

    @pytest.mark.parametrize(
        "value",
        ["vm.count 10", "vm.count ten COUNT", "vm.count 10 PARSECS"],
    )
    def test_rejects_malformed_entries(self, value: str) -> None:
        with pytest.raises(ValidationError):
            parse_limits(value)

    def test_wire_shape(self) -> None:
        spec = limits_to_quota_spec(parse_limits("vm.cpu 4 COUNT"))
        assert spec == {"vm.cpu": {"limit": 4.0, "usage": 0.0, "unit": "COUNT"}}


class TestQuotaHelpers:
    QUOTA = (
        QuotaStatus(key="vm.count", limit=100.0, usage=20.0, unit="COUNT"),
        QuotaStatus(key="vm.memory", limit=64.0, usage=0.0, unit="GB"),
    )

    def test_subdivide_scales_limits(self) -> None:
        spec = subdivide_quota(self.QUOTA, 0.25)
        assert spec["vm.count"]["limit"] == 25.0
        assert spec["vm.memory"] == {"limit": 16.0, "usage": 0.0, "unit": "GB"}

    def test_quota_to_string(self) -> None:
        assert quota_to_string(self.QUOTA) == "vm.count:100:20:COUNT,vm.memory:64:0:GB"
