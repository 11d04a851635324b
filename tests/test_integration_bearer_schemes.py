"""Integration tests -- Bearer Schemes wiring from settings to verified tokens."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import jwt
import pytest
from examples.bearer_schemes.app import build_registry, describe_options, main

from tessera.foundation.domain import AuthenticationError
from tessera.infra.auth import AuthenticationTicket, BearerTokenValidator, ConfigurationSection

ISSUER = "https://issuer.example.com"
SIGNING_KEY = b"k" * 32

if TYPE_CHECKING:
    from tessera.infra.auth import AuthSettings


@pytest.mark.integration
class TestBearerSchemesRegistry:
    def test_materializes_scheme_from_file(self, auth_settings: AuthSettings) -> None:
        options = build_registry(auth_settings).get("Bearer")
        assert describe_options(options) == {
            "authority": ISSUER,
            "challenge": "Bearer",
            "backchannel_timeout_seconds": 20.0,
            "require_https_metadata": True,
            "valid_issuers": [ISSUER, "https://unkeyed.example.com"],
            "valid_audiences": ["orders-api"],
            "signing_key_count": 1,
            "bearer_protector_purposes": ["JWTBearerToken", "Bearer", "BearerToken"],
        }

    def test_environment_overrides_file(
        self, auth_settings: AuthSettings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TESSERA_IT_Authentication__Schemes__Bearer__Challenge", "Orders")
        options = build_registry(auth_settings).get("Bearer")
        assert options.challenge == "Orders"
        assert options.authority == ISSUER

    def test_tickets_survive_registry_rebuild(self, auth_settings: AuthSettings) -> None:
        first = build_registry(auth_settings).get("Bearer")
        second = build_registry(auth_settings).get("Bearer")
        assert first.bearer_token_protector is not None
        assert second.bearer_token_protector is not None

        ticket = AuthenticationTicket(authentication_scheme="Bearer", claims={"sub": "u1"})
        protected = first.bearer_token_protector.protect(ticket)
        assert second.bearer_token_protector.unprotect(protected) == ticket

    def test_ephemeral_key_warns(
        self, auth_settings: AuthSettings, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings = auth_settings.model_copy(update={"data_protection_key": ""})
        with caplog.at_level(logging.WARNING, logger="examples.bearer_schemes.app"):
            options = build_registry(settings).get("Bearer")
        assert options.bearer_token_protector is not None
        assert any(r.getMessage() == "data_protection_ephemeral_key" for r in caplog.records)

    def test_explicit_configuration(self, auth_settings: AuthSettings) -> None:
        configuration = ConfigurationSection.from_mapping(
            {"Authentication": {"Schemes": {"Internal": {"Challenge": "Internal"}}}}
        )
        registry = build_registry(auth_settings, configuration)
        assert registry.get("Internal").challenge == "Internal"
        assert registry.get("Bearer").authority is None


@pytest.mark.integration
class TestBearerSchemesTokens:
    def test_token_from_keyed_issuer_accepted(self, auth_settings: AuthSettings) -> None:
        options = build_registry(auth_settings).get("Bearer")
        token = jwt.encode(
            {"iss": ISSUER, "aud": "orders-api", "sub": "u1", "exp": int(time.time()) + 60},
            SIGNING_KEY,
            algorithm="HS256",
        )
        assert BearerTokenValidator(options).validate(token)["sub"] == "u1"

    def test_token_from_unkeyed_issuer_rejected(self, auth_settings: AuthSettings) -> None:
        options = build_registry(auth_settings).get("Bearer")
        token = jwt.encode(
            {"iss": "https://unkeyed.example.com", "aud": "orders-api"},
            b"u" * 32,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options).validate(token)
        assert exc_info.value.error_code == "INVALID_SIGNATURE"


@pytest.mark.integration
class TestMain:
    def test_main_materializes_default_scheme(
        self,
        auth_settings: AuthSettings,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("examples.bearer_schemes.app.get_auth_settings", lambda: auth_settings)
        monkeypatch.setattr("examples.bearer_schemes.app.configure_logging", lambda: None)
        assert main([]) == 0
        assert main(["Bearer"]) == 0
