"""Tests for the YAML-backed config store."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from photon_cli.exceptions import ConfigurationError
from photon_cli.infra.config_store import CliConfig, ConfigStore, NamedRef, default_config_path


class TestLoad:
    def test_missing_file_is_empty_config(self, tmp_path: Path) -> None:
        assert ConfigStore(tmp_path / "nope").load() == CliConfig()

    def test_empty_file_is_empty_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config"
        path.write_text("", encoding="utf-8")
        assert ConfigStore(path).load() == CliConfig()

    def test_unparseable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config"
        path.write_text("cloud_target: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Cannot read"):
            ConfigStore(path).load()

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="not a mapping"):
            ConfigStore(path).load()


class TestSave:
    def test_round_trip_keeps_defaults(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path / "config")
        config = CliConfig(
            cloud_target="https://ctl:9000",
            token="tok",
            ignore_cert=True,
            tenant=NamedRef("acme", "t1"),
            project=NamedRef("web", "p1"),
        )
        store.save(config)
        assert store.load() == config

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_file_is_private(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path / "config")
        store.save(CliConfig(cloud_target="https://ctl:9000"))
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    def test_file_is_created_private(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        modes: list[int] = []
        real_open = os.open
        target = tmp_path / "config"

        def _open(path: object, flags: int, mode: int = 0o777) -> int:
            if Path(str(path)) == target:
                modes.append(mode)
            return real_open(path, flags, mode)

        monkeypatch.setattr("photon_cli.infra.config_store.os.open", _open)
        ConfigStore(target).save(CliConfig(token="secret"))
        assert modes == [0o600]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_existing_readable_file_is_tightened(self, tmp_path: Path) -> None:
        path = tmp_path / "config"
        path.write_text("cloud_target: x\n", encoding="utf-8")
        os.chmod(path, 0o644)
        ConfigStore(path).save(CliConfig(token="secret"))
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_remove(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path / "config")
        store.save(CliConfig(cloud_target="x"))
        store.remove()
        store.remove()
        assert not store.path.exists()


class TestDefaults:
    def test_switching_tenant_drops_project(self) -> None:
        config = CliConfig(tenant=NamedRef("a", "1"), project=NamedRef("p", "2"))
        switched = config.with_tenant(NamedRef("b", "3"))
        assert switched.tenant == NamedRef("b", "3")
        assert switched.project is None

    def test_env_var_overrides_path(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("PHOTON_CONFIG_FILE", str(tmp_path / "custom"))
        assert default_config_path() == tmp_path / "custom"
