"""Read a deployment map file from disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from photon_cli.core.dc_map import DeploymentMap, parse_deployment_map
from photon_cli.exceptions import ValidationError

logger = logging.getLogger(__name__)


def load_deployment_map(path: str | Path) -> DeploymentMap:
    """Load and interpret the YAML deployment map at *path*.

    Raises
    ------
    ValidationError
        If the file is missing, is not valid YAML, or does not describe
        a deployment and its hosts.
    """
    source = Path(path).expanduser()
    if not source.is_file():
        raise ValidationError(f"Deployment map '{source}' does not exist.")
    try:
        raw: Any = yaml.safe_load(source.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ValidationError(f"Cannot read deployment map {source}: {exc}") from exc

    dc_map = parse_deployment_map(raw)
    logger.debug(
        "deployment map %s: %d host(s), %d availability zone(s)",
        source,
        len(dc_map.hosts),
        len(dc_map.availability_zones),
    )
    return dc_map
