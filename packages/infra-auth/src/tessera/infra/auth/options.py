"""Bearer authentication options records.

``JwtBearerOptions`` is the mutable record the options registry creates with
framework defaults and hands to ``JwtBearerConfigureOptions.configure`` to
fill in from configuration. ``TokenValidationParameters`` carries the
issuer/audience allow-lists and issuer signing keys used when verifying
bearer tokens.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from tessera.foundation.domain.exceptions import ConfigurationError

if TYPE_CHECKING:
    from tessera.infra.auth.protection import TicketDataFormat

DEFAULT_CHALLENGE = "Bearer"
DEFAULT_BACKCHANNEL_TIMEOUT = timedelta(minutes=1)
DEFAULT_REFRESH_INTERVAL = timedelta(minutes=5)
DEFAULT_BEARER_TOKEN_EXPIRATION = timedelta(hours=1)
DEFAULT_REFRESH_TOKEN_EXPIRATION = timedelta(days=14)


@dataclass(slots=True)
class TokenValidationParameters:
    """Parameters used to verify a bearer token.

    Attributes:
        validate_issuer: Whether the ``iss`` claim is checked.
        valid_issuers: Accepted issuers in configuration order. Children without
            a value are kept as None.
        valid_issuer: Legacy single accepted issuer, independent of the list.
        validate_audience: Whether the ``aud`` claim is checked.
        valid_audiences: Accepted audiences in configuration order, None for
            children without a value.
        valid_audience: Legacy single accepted audience.
        validate_issuer_signing_key: Whether the signing key is validated.
        issuer_signing_keys: Raw symmetric keys, at most one per issuer.
    """

    validate_issuer: bool = True
    valid_issuers: list[str | None] = field(default_factory=list)
    valid_issuer: str | None = None
    validate_audience: bool = True
    valid_audiences: list[str | None] = field(default_factory=list)
    valid_audience: str | None = None
    validate_issuer_signing_key: bool = False
    issuer_signing_keys: list[bytes] = field(default_factory=list, repr=False)

    def accepted_issuers(self) -> list[str]:
        """Legacy ``valid_issuer`` (if set) followed by ``valid_issuers``."""
        return _accepted(self.valid_issuer, self.valid_issuers)

    def accepted_audiences(self) -> list[str]:
        """Legacy ``valid_audience`` (if set) followed by ``valid_audiences``."""
        return _accepted(self.valid_audience, self.valid_audiences)


def _accepted(single: str | None, values: list[str | None]) -> list[str]:
    accepted = [single] if single else []
    accepted.extend(v for v in values if v)
    return accepted


@dataclass(slots=True)
class JwtBearerOptions:
    """Options for one bearer authentication scheme.

    Field defaults are the framework defaults a fresh record starts with;
    configuration only overrides fields it explicitly provides.
    """

    authority: str | None = None
    backchannel_timeout: timedelta = DEFAULT_BACKCHANNEL_TIMEOUT
    challenge: str = DEFAULT_CHALLENGE
    forward_authenticate: str | None = None
    forward_challenge: str | None = None
    forward_default: str | None = None
    forward_forbid: str | None = None
    forward_sign_in: str | None = None
    forward_sign_out: str | None = None
    include_error_details: bool = True
    map_inbound_claims: bool = True
    metadata_address: str | None = None
    refresh_interval: timedelta = DEFAULT_REFRESH_INTERVAL
    refresh_on_issuer_key_not_found: bool = True
    require_https_metadata: bool = True
    save_token: bool = True
    bearer_token_expiration: timedelta = DEFAULT_BEARER_TOKEN_EXPIRATION
    refresh_token_expiration: timedelta = DEFAULT_REFRESH_TOKEN_EXPIRATION
    token_validation_parameters: TokenValidationParameters = field(
        default_factory=TokenValidationParameters
    )
    bearer_token_protector: TicketDataFormat | None = field(default=None, compare=False)
    refresh_token_protector: TicketDataFormat | None = field(default=None, compare=False)

    def validate(self) -> None:
        """Check the record is usable once configuration has been applied.

        Raises:
            ConfigurationError: If a metadata endpoint must use HTTPS but
                does not, or a timeout or expiration is not positive.
        """
        if self.require_https_metadata:
            for name, url in (
                ("MetadataAddress", self.metadata_address),
                ("Authority", self.authority),
            ):
                if url and urlsplit(url).scheme.lower() != "https":
                    raise ConfigurationError(
                        f"{name} must use HTTPS unless RequireHttpsMetadata is false",
                        context={"field": name, "value": url},
                    )

        for name, value in (
            ("BackchannelTimeout", self.backchannel_timeout),
            ("BearerTokenExpiration", self.bearer_token_expiration),
            ("RefreshTokenExpiration", self.refresh_token_expiration),
        ):
            if value <= timedelta(0):
                raise ConfigurationError(
                    f"{name} must be positive",
                    context={"field": name, "value": str(value)},
                )
