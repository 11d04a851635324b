"""Tessera Infra Auth -- bearer scheme options, signing keys, ticket protection.

Provides the configuration tree, typed value parsing, per-issuer signing key
resolution, the scheme options builder and registry, Fernet-backed ticket
protectors, and PyJWT-backed bearer token verification.
"""

from tessera.infra.auth.configuration import (
    AuthenticationConfigurationProvider,
    ConfigurationSection,
)
from tessera.infra.auth.configure_options import (
    BEARER_TOKEN_PURPOSE,
    PRIMARY_PURPOSE,
    REFRESH_TOKEN_PURPOSE,
    JwtBearerConfigureOptions,
)
from tessera.infra.auth.options import JwtBearerOptions, TokenValidationParameters
from tessera.infra.auth.parsing import (
    parse_bool,
    parse_or_default,
    parse_timespan,
    parse_timespan_invariant,
)
from tessera.infra.auth.protection import (
    AuthenticationTicket,
    FernetDataProtectionProvider,
    FernetDataProtector,
    TicketDataFormat,
    generate_master_key,
)
from tessera.infra.auth.registry import OptionsRegistry
from tessera.infra.auth.settings import AuthSettings, get_auth_settings
from tessera.infra.auth.signing_keys import (
    SigningKeyEntry,
    resolve_issuer_signing_keys,
    signing_key_entries,
)
from tessera.infra.auth.token_validation import BearerTokenValidator

__all__ = [
    "BEARER_TOKEN_PURPOSE",
    "PRIMARY_PURPOSE",
    "REFRESH_TOKEN_PURPOSE",
    "AuthSettings",
    "AuthenticationConfigurationProvider",
    "AuthenticationTicket",
    "BearerTokenValidator",
    "ConfigurationSection",
    "FernetDataProtectionProvider",
    "FernetDataProtector",
    "JwtBearerConfigureOptions",
    "JwtBearerOptions",
    "OptionsRegistry",
    "SigningKeyEntry",
    "TicketDataFormat",
    "TokenValidationParameters",
    "generate_master_key",
    "get_auth_settings",
    "parse_bool",
    "parse_or_default",
    "parse_timespan",
    "parse_timespan_invariant",
    "resolve_issuer_signing_keys",
    "signing_key_entries",
]
