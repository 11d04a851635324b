"""Bearer Schemes application wiring.

Usage::

    AUTH_CONFIG_FILE=schemes.json python -m examples.bearer_schemes.app Bearer
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

from tessera.infra.auth import (
    AuthenticationConfigurationProvider,
    AuthSettings,
    FernetDataProtectionProvider,
    JwtBearerConfigureOptions,
    OptionsRegistry,
    generate_master_key,
    get_auth_settings,
)
from tessera.infra.observability import configure_logging, get_logger

if TYPE_CHECKING:
    from tessera.infra.auth import ConfigurationSection, JwtBearerOptions

logger = logging.getLogger(__name__)


def build_registry(
    settings: AuthSettings | None = None,
    configuration: ConfigurationSection | None = None,
) -> OptionsRegistry:
    """Wire configuration, protection and the options builder into a registry.

    Args:
        settings: Auth settings. Defaults to ``get_auth_settings()``.
        configuration: Configuration root. Defaults to the tree loaded from
            ``settings``.
    """
    if settings is None:
        settings = get_auth_settings()
    if configuration is None:
        configuration = settings.load_configuration()

    master_key = settings.data_protection_key
    if not master_key:
        # Protected tickets will not survive a restart.
        logger.warning("data_protection_ephemeral_key")
        master_key = generate_master_key()

    configure_options = JwtBearerConfigureOptions(
        AuthenticationConfigurationProvider(configuration, settings.schemes_section),
        FernetDataProtectionProvider(master_key),
    )
    return OptionsRegistry(
        configure_options,
        maxsize=settings.options_cache_size,
        ttl=settings.options_cache_ttl,
    )


def describe_options(options: JwtBearerOptions) -> dict[str, Any]:
    """Summarize an options record without exposing key material."""
    parameters = options.token_validation_parameters
    return {
        "authority": options.authority,
        "challenge": options.challenge,
        "backchannel_timeout_seconds": options.backchannel_timeout.total_seconds(),
        "require_https_metadata": options.require_https_metadata,
        "valid_issuers": list(parameters.valid_issuers),
        "valid_audiences": list(parameters.valid_audiences),
        "signing_key_count": len(parameters.issuer_signing_keys),
        "bearer_protector_purposes": (
            list(options.bearer_token_protector.purposes) if options.bearer_token_protector else []
        ),
    }


def main(argv: list[str] | None = None) -> int:
    """Materialize one scheme (default: ``AUTH_DEFAULT_SCHEME``) and log it."""
    configure_logging()
    args = sys.argv[1:] if argv is None else argv
    settings = get_auth_settings()
    scheme = args[0] if args else settings.default_scheme

    options = build_registry(settings).get(scheme)
    get_logger(__name__).info("scheme_materialized", scheme=scheme, **describe_options(options))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
