"""Materializes bearer authentication options from scheme configuration.

``JwtBearerConfigureOptions.configure`` fills a ``JwtBearerOptions`` record
for one named scheme:

1. The default (empty) scheme name is never configured here.
2. Both ticket protectors are always assigned for a named scheme.
3. Without a configuration subtree for the scheme, every other field keeps
   the value the record already carried.
4. Otherwise each scalar key overrides its field only when present and
   non-empty, and the issuer/audience allow-lists and issuer signing keys
   are rebuilt from the subtree.

The builder holds no mutable state. Concurrent calls are safe as long as
each targets its own options record.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tessera.foundation.domain.scheme import DEFAULT_SCHEME_NAME
from tessera.infra.auth.options import TokenValidationParameters
from tessera.infra.auth.parsing import (
    parse_bool,
    parse_or_default,
    parse_string,
    parse_timespan,
    parse_timespan_invariant,
)
from tessera.infra.auth.protection import TicketDataFormat
from tessera.infra.auth.signing_keys import resolve_issuer_signing_keys, signing_key_entries

if TYPE_CHECKING:
    from tessera.foundation.domain.ports import (
        ConfigurationSectionPort,
        DataProtectionProviderPort,
        SchemeConfigurationProviderPort,
    )
    from tessera.infra.auth.options import JwtBearerOptions

logger = logging.getLogger(__name__)

PRIMARY_PURPOSE = "JWTBearerToken"
BEARER_TOKEN_PURPOSE = "BearerToken"
REFRESH_TOKEN_PURPOSE = "RefreshToken"

SIGNING_KEYS_SECTION = "SigningKeys"


class JwtBearerConfigureOptions:
    """Configures named ``JwtBearerOptions`` from scheme configuration.

    Args:
        configuration_provider: Resolves the configuration subtree of a scheme.
        protection_provider: Creates the purpose-scoped ticket protectors.

    Example:
        >>> configurer = JwtBearerConfigureOptions(provider, protection)
        >>> options = JwtBearerOptions()
        >>> configurer.configure(options, "Bearer")
        >>> options.token_validation_parameters.valid_issuers
        ['https://issuer.example.com']
    """

    def __init__(
        self,
        configuration_provider: SchemeConfigurationProviderPort,
        protection_provider: DataProtectionProviderPort,
    ) -> None:
        self._configuration_provider = configuration_provider
        self._protection_provider = protection_provider

    def configure(self, options: JwtBearerOptions, name: str | None = DEFAULT_SCHEME_NAME) -> None:
        """Apply the configuration of scheme ``name`` to ``options`` in place.

        The record comes before the name, so ``name`` can default to the
        unnamed scheme: ``configure(options)`` is a no-op, and
        ``configure(options, "Bearer")`` configures a named scheme.

        Args:
            options: Record to mutate. Fields without configuration keep
                their current values.
            name: Scheme name. None or the default sentinel leaves
                ``options`` untouched.

        Raises:
            FieldFormatError: If a non-empty boolean or duration value is malformed.
            KeyDecodeError: If a matched signing key value is not valid base64.
        """
        if not name:
            return

        options.bearer_token_protector = self._ticket_format(name, BEARER_TOKEN_PURPOSE)
        options.refresh_token_protector = self._ticket_format(name, REFRESH_TOKEN_PURPOSE)

        section = self._configuration_provider.get_scheme_configuration(name)
        if section is None or not section.get_children():
            logger.debug("jwt_bearer_scheme_not_configured", extra={"scheme": name})
            return

        issuer = section.get("ValidIssuer")
        issuers = _child_values(section.get_section("ValidIssuers"))
        audience = section.get("ValidAudience")
        audiences = _child_values(section.get_section("ValidAudiences"))

        options.authority = parse_or_default(
            section.get("Authority"), parse_string, options.authority
        )
        options.backchannel_timeout = parse_or_default(
            section.get("BackchannelTimeout"), parse_timespan_invariant, options.backchannel_timeout
        )
        options.challenge = parse_or_default(
            section.get("Challenge"), parse_string, options.challenge
        )
        options.forward_authenticate = parse_or_default(
            section.get("ForwardAuthenticate"), parse_string, options.forward_authenticate
        )
        options.forward_challenge = parse_or_default(
            section.get("ForwardChallenge"), parse_string, options.forward_challenge
        )
        options.forward_default = parse_or_default(
            section.get("ForwardDefault"), parse_string, options.forward_default
        )
        options.forward_forbid = parse_or_default(
            section.get("ForwardForbid"), parse_string, options.forward_forbid
        )
        options.forward_sign_in = parse_or_default(
            section.get("ForwardSignIn"), parse_string, options.forward_sign_in
        )
        options.forward_sign_out = parse_or_default(
            section.get("ForwardSignOut"), parse_string, options.forward_sign_out
        )
        options.include_error_details = parse_or_default(
            section.get("IncludeErrorDetails"), parse_bool, options.include_error_details
        )
        options.map_inbound_claims = parse_or_default(
            section.get("MapInboundClaims"), parse_bool, options.map_inbound_claims
        )
        options.metadata_address = parse_or_default(
            section.get("MetadataAddress"), parse_string, options.metadata_address
        )
        options.refresh_interval = parse_or_default(
            section.get("RefreshInterval"), parse_timespan_invariant, options.refresh_interval
        )
        options.refresh_on_issuer_key_not_found = parse_or_default(
            section.get("RefreshOnIssuerKeyNotFound"),
            parse_bool,
            options.refresh_on_issuer_key_not_found,
        )
        options.require_https_metadata = parse_or_default(
            section.get("RequireHttpsMetadata"), parse_bool, options.require_https_metadata
        )
        options.save_token = parse_or_default(
            section.get("SaveToken"), parse_bool, options.save_token
        )
        options.token_validation_parameters = TokenValidationParameters(
            validate_issuer=len(issuers) > 0,
            valid_issuers=issuers,
            valid_issuer=issuer,
            validate_audience=len(audiences) > 0,
            valid_audiences=audiences,
            valid_audience=audience,
            validate_issuer_signing_key=True,
            issuer_signing_keys=resolve_issuer_signing_keys(
                issuers, signing_key_entries(section.get_section(SIGNING_KEYS_SECTION))
            ),
        )
        # TODO: switch to parse_timespan_invariant once the expiration keys are
        # confirmed to be written in invariant format everywhere.
        options.bearer_token_expiration = parse_or_default(
            section.get("BearerTokenExpiration"), parse_timespan, options.bearer_token_expiration
        )
        options.refresh_token_expiration = parse_or_default(
            section.get("RefreshTokenExpiration"), parse_timespan, options.refresh_token_expiration
        )

        logger.debug(
            "jwt_bearer_scheme_configured",
            extra={
                "scheme": name,
                "issuer_count": len(issuers),
                "audience_count": len(audiences),
                "signing_key_count": len(options.token_validation_parameters.issuer_signing_keys),
            },
        )

    def _ticket_format(self, scheme: str, purpose: str) -> TicketDataFormat:
        protector = self._protection_provider.create_protector(PRIMARY_PURPOSE, scheme, purpose)
        return TicketDataFormat(protector)


def _child_values(section: ConfigurationSectionPort) -> list[str | None]:
    return [child.value for child in section.get_children()]
