"""Bearer token verification against materialized validation parameters.

Signature checking is delegated to PyJWT. This module only decides which
keys to try and which issuers and audiences to accept, following the
``TokenValidationParameters`` of a scheme.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import jwt as pyjwt

from tessera.foundation.domain.exceptions import AuthenticationError

if TYPE_CHECKING:
    from tessera.infra.auth.options import JwtBearerOptions

logger = logging.getLogger(__name__)

SYMMETRIC_ALGORITHMS: tuple[str, ...] = ("HS256", "HS384", "HS512")


class BearerTokenValidator:
    """Verifies bearer tokens with a scheme's issuer signing keys.

    Args:
        options: Configured options of the scheme.
        algorithms: Accepted signing algorithms (symmetric only).
        leeway: Clock skew tolerance in seconds for ``exp``/``nbf``.

    Example:
        >>> validator = BearerTokenValidator(registry.get("Bearer"))
        >>> claims = validator.validate(token)
    """

    def __init__(
        self,
        options: JwtBearerOptions,
        algorithms: tuple[str, ...] = SYMMETRIC_ALGORITHMS,
        leeway: float = 0,
    ) -> None:
        self._parameters = options.token_validation_parameters
        self._algorithms = list(algorithms)
        self._leeway = leeway

    def validate(self, token: str) -> dict[str, Any]:
        """Verify ``token`` and return its claims.

        Each issuer signing key is tried in order until one verifies the
        signature. Issuer and audience are then checked against the
        allow-lists when the parameters require it.

        Raises:
            AuthenticationError: If the token is malformed, expired, signed
                with an unknown key, or carries an unaccepted issuer or
                audience.
        """
        keys = self._parameters.issuer_signing_keys
        if self._parameters.validate_issuer_signing_key and not keys:
            raise AuthenticationError(
                "No issuer signing keys configured",
                error_code="NO_SIGNING_KEYS",
            )

        claims = self._decode(token, keys)
        self._check_issuer(claims)
        return claims

    def _decode(self, token: str, keys: list[bytes]) -> dict[str, Any]:
        audiences = self._parameters.accepted_audiences()
        verify_audience = self._parameters.validate_audience or bool(self._parameters.valid_audience)
        for key in keys:
            try:
                claims: dict[str, Any] = pyjwt.decode(
                    token,
                    key,
                    algorithms=self._algorithms,
                    audience=audiences if verify_audience else None,
                    leeway=self._leeway,
                    options={"verify_aud": verify_audience},
                )
            except pyjwt.InvalidSignatureError:
                continue
            except pyjwt.ExpiredSignatureError as exc:
                raise AuthenticationError("Token has expired", error_code="TOKEN_EXPIRED") from exc
            except pyjwt.InvalidAudienceError as exc:
                raise AuthenticationError(
                    "Invalid audience claim", error_code="INVALID_AUDIENCE"
                ) from exc
            except pyjwt.MissingRequiredClaimError as exc:
                raise AuthenticationError(
                    f"Missing required claim: {exc.claim}", error_code="INVALID_AUDIENCE"
                ) from exc
            except pyjwt.DecodeError as exc:
                raise AuthenticationError("Token is malformed", error_code="MALFORMED_TOKEN") from exc
            except pyjwt.InvalidTokenError as exc:
                raise AuthenticationError(
                    "Token validation failed", error_code="INVALID_TOKEN"
                ) from exc
            return claims

        logger.debug("bearer_token_signature_rejected", extra={"key_count": len(keys)})
        raise AuthenticationError(
            "Token signature verification failed", error_code="INVALID_SIGNATURE"
        )

    def _check_issuer(self, claims: dict[str, Any]) -> None:
        if not (self._parameters.validate_issuer or self._parameters.valid_issuer):
            return
        if claims.get("iss") not in self._parameters.accepted_issuers():
            raise AuthenticationError(
                "Invalid issuer claim",
                error_code="INVALID_ISSUER",
                context={"issuer": str(claims.get("iss"))},
            )
