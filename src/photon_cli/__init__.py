"""photon-cli — command-line client for the Photon Controller API.

Built on a strict layered architecture: pure ``core`` primitives, an
``infra`` layer wrapping HTTP and the local config file, and a ``cli``
layer that owns argument parsing, prompts and rendering.
"""

from photon_cli.version import __version__

__all__: list[str] = ["__version__"]
