"""Tessera Foundation Domain -- pure Python domain primitives.

This package provides the foundational building blocks shared by the
authentication layers: the exception hierarchy, the scheme name sentinel,
and the port interfaces for configuration sources and data protection.
"""

from tessera.foundation.domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DomainError,
    FieldFormatError,
    KeyDecodeError,
)
from tessera.foundation.domain.ports import (
    ConfigurationSectionPort,
    DataProtectionProviderPort,
    DataProtectorPort,
    SchemeConfigurationProviderPort,
)
from tessera.foundation.domain.scheme import DEFAULT_SCHEME_NAME

__all__ = [
    "DEFAULT_SCHEME_NAME",
    "AuthenticationError",
    "ConfigurationError",
    "ConfigurationSectionPort",
    "DataProtectionProviderPort",
    "DataProtectorPort",
    "DomainError",
    "FieldFormatError",
    "KeyDecodeError",
    "SchemeConfigurationProviderPort",
]
