"""Shared fixtures for integration tests."""

from __future__ import annotations

import base64
import json
from typing import TYPE_CHECKING, Any

import pytest

from tessera.infra.auth import AuthSettings

if TYPE_CHECKING:
    from pathlib import Path

ISSUER = "https://issuer.example.com"
SIGNING_KEY = b"k" * 32


@pytest.fixture()
def schemes_document() -> dict[str, Any]:
    """Configuration tree with one fully configured scheme."""
    return {
        "Authentication": {
            "Schemes": {
                "Bearer": {
                    "Authority": ISSUER,
                    "BackchannelTimeout": "00:00:20",
                    "ValidIssuers": [ISSUER, "https://unkeyed.example.com"],
                    "ValidAudiences": ["orders-api"],
                    "SigningKeys": [
                        {"Issuer": ISSUER, "Value": base64.b64encode(SIGNING_KEY).decode()},
                    ],
                },
            }
        }
    }


@pytest.fixture()
def auth_settings(
    schemes_document: dict[str, Any],
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> AuthSettings:
    """Settings reading ``schemes_document`` from a JSON file."""
    for name in ("AUTH_DATA_PROTECTION_KEY", "AUTH_SCHEMES_SECTION", "AUTH_CONFIG_ENV_PREFIX"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "schemes.json"
    path.write_text(json.dumps(schemes_document), encoding="utf-8")
    return AuthSettings(  # type: ignore[call-arg]
        _env_file=None,
        config_file=path,
        config_env_prefix="TESSERA_IT_",
        data_protection_key="integration-master-key",
    )
