"""Domain port interfaces for hexagonal architecture.

Ports define abstract interfaces that the domain layer uses to interact
with external services. Implementations (adapters) live in infrastructure.
"""

from tessera.foundation.domain.ports.configuration import (
    ConfigurationSectionPort,
    SchemeConfigurationProviderPort,
)
from tessera.foundation.domain.ports.data_protection import (
    DataProtectionProviderPort,
    DataProtectorPort,
)

__all__ = [
    "ConfigurationSectionPort",
    "DataProtectionProviderPort",
    "DataProtectorPort",
    "SchemeConfigurationProviderPort",
]
