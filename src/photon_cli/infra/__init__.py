"""Infrastructure layer — external system integration.

This layer wraps all interaction with the controller's HTTP API, the local
config file and deployment map files.  Every raw third-party exception
must be caught here and re-raised as a
:class:`~photon_cli.exceptions.PhotonCliError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Never waits on tasks or follows page links; that belongs to ``core``.
"""

from photon_cli.infra.config_store import CliConfig, ConfigStore, NamedRef
from photon_cli.infra.dc_map_loader import load_deployment_map
from photon_cli.infra.photon_api import PhotonClient
from photon_cli.infra.rest_client import RestClient

__all__: list[str] = [
    "CliConfig",
    "ConfigStore",
    "NamedRef",
    "PhotonClient",
    "RestClient",
    "load_deployment_map",
]
