"""Tests for bearer token verification with issuer signing keys."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import jwt
import pytest

from tessera.foundation.domain.exceptions import AuthenticationError
from tessera.infra.auth.configure_options import JwtBearerConfigureOptions
from tessera.infra.auth.options import JwtBearerOptions
from tessera.infra.auth.token_validation import BearerTokenValidator

ISSUER_A = "https://issuer-a.example.com"
ISSUER_B = "https://issuer-b.example.com"
KEY_A = b"a" * 32
KEY_B = b"b" * 32

MakeConfigurer = Callable[[dict[str, Any]], JwtBearerConfigureOptions]


def _token(key: bytes, **claims: Any) -> str:
    payload = {"iss": ISSUER_A, "aud": "api", "exp": int(time.time()) + 300, **claims}
    return jwt.encode(payload, key, algorithm="HS256")


@pytest.fixture()
def options(make_configurer: MakeConfigurer, two_issuer_scheme: dict[str, Any]) -> JwtBearerOptions:
    record = JwtBearerOptions()
    make_configurer({"Bearer": two_issuer_scheme}).configure(record, "Bearer")
    return record


@pytest.mark.unit
class TestBearerTokenValidator:
    def test_valid_token_first_key(self, options: JwtBearerOptions) -> None:
        claims = BearerTokenValidator(options).validate(_token(KEY_A, sub="u1"))
        assert claims["sub"] == "u1"
        assert claims["iss"] == ISSUER_A

    def test_valid_token_second_key(self, options: JwtBearerOptions) -> None:
        claims = BearerTokenValidator(options).validate(_token(KEY_B, iss=ISSUER_B))
        assert claims["iss"] == ISSUER_B

    def test_unknown_key_rejected(self, options: JwtBearerOptions) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options).validate(_token(b"c" * 32))
        assert exc_info.value.error_code == "INVALID_SIGNATURE"

    def test_unaccepted_issuer_rejected(self, options: JwtBearerOptions) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options).validate(_token(KEY_A, iss="https://evil.example.com"))
        assert exc_info.value.error_code == "INVALID_ISSUER"

    def test_unaccepted_audience_rejected(self, options: JwtBearerOptions) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options).validate(_token(KEY_A, aud="other"))
        assert exc_info.value.error_code == "INVALID_AUDIENCE"

    def test_missing_audience_rejected(self, options: JwtBearerOptions) -> None:
        token = jwt.encode(
            {"iss": ISSUER_A, "exp": int(time.time()) + 300}, KEY_A, algorithm="HS256"
        )
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options).validate(token)
        assert exc_info.value.error_code == "INVALID_AUDIENCE"

    def test_expired_token_rejected(self, options: JwtBearerOptions) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options).validate(_token(KEY_A, exp=int(time.time()) - 60))
        assert exc_info.value.error_code == "TOKEN_EXPIRED"

    def test_leeway_tolerates_skew(self, options: JwtBearerOptions) -> None:
        token = _token(KEY_A, exp=int(time.time()) - 5)
        assert BearerTokenValidator(options, leeway=60).validate(token)["iss"] == ISSUER_A

    def test_malformed_token_rejected(self, options: JwtBearerOptions) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options).validate("not.a.jwt")
        assert exc_info.value.error_code == "MALFORMED_TOKEN"

    def test_unlisted_algorithm_rejected(self, options: JwtBearerOptions) -> None:
        token = jwt.encode(
            {"iss": ISSUER_A, "aud": "api", "exp": int(time.time()) + 300},
            KEY_A,
            algorithm="HS512",
        )
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(options, algorithms=("HS256",)).validate(token)
        assert exc_info.value.error_code == "INVALID_TOKEN"

    def test_no_keys_rejected(self, make_configurer: MakeConfigurer) -> None:
        record = JwtBearerOptions()
        make_configurer({"Bearer": {"ValidIssuers": [ISSUER_A]}}).configure(record, "Bearer")
        with pytest.raises(AuthenticationError) as exc_info:
            BearerTokenValidator(record).validate(_token(KEY_A))
        assert exc_info.value.error_code == "NO_SIGNING_KEYS"

    def test_issuer_not_checked_without_allow_list(self) -> None:
        record = JwtBearerOptions()
        parameters = record.token_validation_parameters
        parameters.validate_issuer = False
        parameters.validate_audience = False
        parameters.validate_issuer_signing_key = True
        parameters.issuer_signing_keys = [KEY_A]
        token = jwt.encode({"iss": "anyone", "aud": "anything"}, KEY_A, algorithm="HS256")
        assert BearerTokenValidator(record).validate(token)["iss"] == "anyone"

    def test_legacy_single_issuer_accepted(self) -> None:
        record = JwtBearerOptions()
        parameters = record.token_validation_parameters
        parameters.validate_issuer = False
        parameters.valid_issuer = "legacy"
        parameters.validate_audience = False
        parameters.issuer_signing_keys = [KEY_A]
        validator = BearerTokenValidator(record)

        assert validator.validate(jwt.encode({"iss": "legacy"}, KEY_A, algorithm="HS256"))
        with pytest.raises(AuthenticationError):
            validator.validate(jwt.encode({"iss": "other"}, KEY_A, algorithm="HS256"))
