"""Bearer Schemes -- minimal example wiring Tessera's options registry.

Loads the configuration tree from ``AUTH_CONFIG_FILE`` and ``TESSERA_``
environment variables, materializes a bearer scheme and prints a summary.

Modules:
    app: Registry factory (build_registry), summary helper, ``main`` entry point
"""

from .app import build_registry, describe_options, main

__all__ = ["build_registry", "describe_options", "main"]
