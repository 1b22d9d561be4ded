"""YAML-backed persistence of the CLI's local context.

The config file records which controller to talk to, the access token,
and the default tenant / project used when a command omits them.

Rules
-----
* Config persistence always goes through :class:`ConfigStore`.
* A missing file is an empty configuration, not an error.
* Any read/parse/write failure is re-raised as
  :class:`~photon_cli.exceptions.ConfigurationError`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from photon_cli.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR: str = "PHOTON_CONFIG_FILE"
DEFAULT_CONFIG_NAME: str = ".photon-config"


@dataclass(frozen=True, slots=True)
class NamedRef:
    """``(name, id)`` pair remembered for a default tenant or project."""

    name: str
    id: str


@dataclass(frozen=True, slots=True)
class CliConfig:
    """Everything persisted between invocations."""

    cloud_target: str = ""
    token: str = ""
    ignore_cert: bool = False
    tenant: NamedRef | None = None
    project: NamedRef | None = None

    def with_tenant(self, tenant: NamedRef | None) -> CliConfig:
        """Switch tenant; the default project belongs to the old tenant and is dropped."""
        return replace(self, tenant=tenant, project=None)

    def with_project(self, project: NamedRef | None) -> CliConfig:
        return replace(self, project=project)


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_CONFIG_NAME


class ConfigStore:
    """Loads and saves :class:`CliConfig` at a fixed path."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or default_config_path()

    def load(self) -> CliConfig:
        if not self.path.exists():
            logger.debug("no config file at %s", self.path)
            return CliConfig()
        try:
            raw: Any = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Cannot read config file {self.path}: {exc}",
                hint=f"Fix or delete {self.path} and run 'photon target set <endpoint>'.",
            ) from exc
        if raw is None:
            return CliConfig()
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {self.path} is not a mapping.")
        return _from_mapping(raw)

    def save(self, config: CliConfig) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            text = yaml.safe_dump(_to_mapping(config), default_flow_style=False, sort_keys=True)
            if self.path.exists():
                # os.open only applies the mode when it creates the file.
                os.chmod(self.path, 0o600)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
        except OSError as exc:
            raise ConfigurationError(f"Cannot write config file {self.path}: {exc}") from exc
        logger.debug("saved config to %s", self.path)

    def remove(self) -> None:
        """Delete the config file if present."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"Cannot remove config file {self.path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Mapping conversion
# ---------------------------------------------------------------------------

def _ref_from(value: object) -> NamedRef | None:
    if not isinstance(value, dict) or not value.get("id"):
        return None
    return NamedRef(name=str(value.get("name") or ""), id=str(value["id"]))


def _from_mapping(raw: dict[str, Any]) -> CliConfig:
    return CliConfig(
        cloud_target=str(raw.get("cloud_target") or ""),
        token=str(raw.get("token") or ""),
        ignore_cert=bool(raw.get("ignore_cert", False)),
        tenant=_ref_from(raw.get("tenant")),
        project=_ref_from(raw.get("project")),
    )


def _to_mapping(config: CliConfig) -> dict[str, Any]:
    data: dict[str, Any] = {
        "cloud_target": config.cloud_target,
        "ignore_cert": config.ignore_cert,
    }
    if config.token:
        data["token"] = config.token
    if config.tenant is not None:
        data["tenant"] = {"name": config.tenant.name, "id": config.tenant.id}
    if config.project is not None:
        data["project"] = {"name": config.project.name, "id": config.project.id}
    return data
