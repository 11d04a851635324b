"""Shared fixtures for infra-auth tests."""

from __future__ import annotations

import base64
from collections.abc import Callable
from typing import Any

import pytest

from tessera.infra.auth.configuration import (
    AuthenticationConfigurationProvider,
    ConfigurationSection,
)
from tessera.infra.auth.configure_options import JwtBearerConfigureOptions
from tessera.infra.auth.protection import FernetDataProtectionProvider

ISSUER_A = "https://issuer-a.example.com"
ISSUER_B = "https://issuer-b.example.com"
KEY_A = b"a" * 32
KEY_B = b"b" * 32


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


@pytest.fixture()
def protection_provider() -> FernetDataProtectionProvider:
    return FernetDataProtectionProvider("test-master-key")


@pytest.fixture()
def make_configurer(
    protection_provider: FernetDataProtectionProvider,
) -> Callable[[dict[str, Any]], JwtBearerConfigureOptions]:
    """Factory building a configurer over ``Authentication:Schemes`` = ``schemes``."""

    def _make(schemes: dict[str, Any]) -> JwtBearerConfigureOptions:
        root = ConfigurationSection.from_mapping({"Authentication": {"Schemes": schemes}})
        return JwtBearerConfigureOptions(
            AuthenticationConfigurationProvider(root),
            protection_provider,
        )

    return _make


@pytest.fixture()
def two_issuer_scheme() -> dict[str, Any]:
    """Scheme with two issuers, one audience and a key for each issuer."""
    return {
        "Authority": "https://issuer-a.example.com",
        "ValidIssuers": [ISSUER_A, ISSUER_B],
        "ValidAudiences": ["api"],
        "SigningKeys": [
            {"Issuer": ISSUER_A, "Value": b64(KEY_A)},
            {"Issuer": ISSUER_B, "Value": b64(KEY_B)},
        ],
    }
