"""Tests for deployment map parsing and loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from photon_cli.core.dc_map import expand_address_ranges, parse_deployment_map
from photon_cli.exceptions import ValidationError
from photon_cli.infra.dc_map_loader import load_deployment_map

DC_MAP = """\
deployment:
  image_datastores: datastore1
  syslog_endpoint: 10.146.64.230
  ntp_endpoint: 10.20.144.1
  use_image_datastore_for_vms: true
  auth_enabled: true
  oauth_endpoint: 0.0.0.0
  oauth_port: 443
  oauth_tenant: "photon"
  oauth_username: "Administrator"
  oauth_password: "Password!"
  oauth_security_groups:
  -  "photon\\\\photonControllerAdmins"

hosts:
  - address_ranges: 10.146.38.91
    username: root
    password: Password!
    usage_tags:
    - CLOUD
    - MGMT
    metadata:
       MANAGEMENT_DATASTORE: datastore1
       MANAGEMENT_NETWORK_DNS_SERVER : 10.142.17.124
  - address_ranges: 10.146.38.92-10.146.38.93,10.146.38.94
    username: root
    password: Password!
    availability_zone: Zone1
    usage_tags:
    - CLOUD
    metadata:
      MANAGEMENT_VM_IPS: 10.146.65.11-10.146.65.12
"""


# ---------------------------------------------------------------------------
# Address ranges
# ---------------------------------------------------------------------------

class TestExpandAddressRanges:
    def test_ranges_and_singles_keep_their_order(self) -> None:
        assert expand_address_ranges("10.146.38.92-10.146.38.93,10.146.38.94") == [
            "10.146.38.92",
            "10.146.38.93",
            "10.146.38.94",
        ]

    def test_range_crossing_an_octet(self) -> None:
        assert expand_address_ranges("10.0.0.255-10.0.1.1") == ["10.0.0.255", "10.0.1.0", "10.0.1.1"]

    @pytest.mark.parametrize("value", ["10.0.0.5-10.0.0.1", "10.0.0", "host-a"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValidationError):
            expand_address_ranges(value)


# ---------------------------------------------------------------------------
# Document interpretation
# ---------------------------------------------------------------------------

class TestParseDeploymentMap:
    @pytest.fixture()
    def map_file(self, tmp_path: Path) -> Path:
        path = tmp_path / "dc_map.yml"
        path.write_text(DC_MAP, encoding="utf-8")
        return path

    def test_deployment_section(self, map_file: Path) -> None:
        deployment = load_deployment_map(map_file).deployment
        assert deployment.image_datastores == ("datastore1",)
        assert deployment.ntp_endpoint == "10.20.144.1"
        assert deployment.use_image_datastore_for_vms is True
        assert deployment.auth.enabled is True
        assert deployment.auth.port == 443
        assert deployment.auth.security_groups == ("photon\\photonControllerAdmins",)

    def test_each_address_becomes_a_host(self, map_file: Path) -> None:
        hosts = load_deployment_map(map_file).hosts
        assert [h.address for h in hosts] == [
            "10.146.38.91",
            "10.146.38.92",
            "10.146.38.93",
            "10.146.38.94",
        ]
        assert hosts[0].tags == ("CLOUD", "MGMT")
        assert hosts[0].metadata["MANAGEMENT_NETWORK_DNS_SERVER"] == "10.142.17.124"
        assert [h.availability_zone for h in hosts] == ["", "Zone1", "Zone1", "Zone1"]

    def test_availability_zones_are_unique(self, map_file: Path) -> None:
        assert load_deployment_map(map_file).availability_zones == ("Zone1",)

    def test_auth_disabled_sends_no_credentials(self) -> None:
        dc_map = parse_deployment_map(
            {"deployment": {"image_datastores": ["ds1", "ds2"]}, "hosts": []},
        )
        assert dc_map.deployment.image_datastores == ("ds1", "ds2")
        assert dc_map.deployment.to_payload()["auth"] == {"enabled": False}

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            (["a"], "must be a mapping"),
            ({"hosts": []}, "no 'deployment' section"),
            ({"deployment": {}, "hosts": []}, "image_datastores"),
            ({"deployment": {"image_datastores": "ds"}}, "no 'hosts' section"),
            ({"deployment": {"image_datastores": "ds"}, "hosts": {"a": 1}}, "must be a list"),
            (
                {"deployment": {"image_datastores": "ds"}, "hosts": [{"address_ranges": "10.0.0.1"}]},
                "missing 'username'",
            ),
        ],
    )
    def test_malformed_documents(self, raw: object, message: str) -> None:
        with pytest.raises(ValidationError, match=message):
            parse_deployment_map(raw)


class TestLoadDeploymentMap:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="does not exist"):
            load_deployment_map(tmp_path / "nope.yml")

    def test_unparseable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "dc_map.yml"
        path.write_text("deployment: [unclosed", encoding="utf-8")
        with pytest.raises(ValidationError, match="Cannot read"):
            load_deployment_map(path)
