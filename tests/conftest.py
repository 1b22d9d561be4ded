"""Shared pytest fixtures and configuration for the photon-cli test suite.

Guidelines
----------
* No network access in any test.
* ``requests`` is mocked at the infra boundary (``requests.Session``).
* Command handlers run against a ``MagicMock`` API client.
* Core tests must be pure — no side effects.
* Tests never touch the real ``~/.photon-config``.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from photon_cli.cli.app import main
from photon_cli.infra.config_store import CliConfig, ConfigStore, NamedRef


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Point the default config location at a throwaway file."""
    monkeypatch.setenv("PHOTON_CONFIG_FILE", str(tmp_path / "default-config"))
    monkeypatch.delenv("PHOTON_LOG_LEVEL", raising=False)


@pytest.fixture()
def config_store(tmp_path: Path) -> ConfigStore:
    """A store whose config already has a target, tenant and project."""
    store = ConfigStore(tmp_path / "photon-config")
    store.save(
        CliConfig(
            cloud_target="https://10.0.0.5:9000",
            tenant=NamedRef(name="tenant-a", id="tenant-a-id"),
            project=NamedRef(name="project-a", id="project-a-id"),
        ),
    )
    return store


@pytest.fixture()
def client() -> MagicMock:
    return MagicMock(name="PhotonClient")


@pytest.fixture()
def run(client: MagicMock, config_store: ConfigStore) -> Callable[..., int]:
    """Invoke :func:`main` with the mocked client and a zero poll interval."""

    def _run(*argv: str) -> int:
        return main(
            ["--poll-interval", "0.001", *argv],
            client_factory=lambda _config: client,
            config_store=config_store,
        )

    return _run
