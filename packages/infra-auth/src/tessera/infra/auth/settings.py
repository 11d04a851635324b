"""Authentication configuration settings.

Loaded from environment variables with AUTH_ prefix.
Follows Pydantic BaseSettings pattern for type-safe configuration.

Environment Variables:
    AUTH_SCHEMES_SECTION: Configuration path holding one subtree per scheme
    AUTH_DEFAULT_SCHEME: Scheme materialized when no name is given
    AUTH_CONFIG_FILE: Optional JSON file with the configuration tree
    AUTH_CONFIG_ENV_PREFIX: Prefix of environment variables merged into the tree
    AUTH_DATA_PROTECTION_KEY: Master key for ticket protectors
    AUTH_OPTIONS_CACHE_TTL: Optional validity window for built options, in seconds
    AUTH_OPTIONS_CACHE_SIZE: Maximum number of cached schemes
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tessera.infra.auth.configuration import DEFAULT_SCHEMES_SECTION, ConfigurationSection

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Authentication configuration loaded from environment variables.

    Environment Variables:
        AUTH_SCHEMES_SECTION: Configuration path of the schemes section
        AUTH_DEFAULT_SCHEME: Default scheme name
        AUTH_CONFIG_FILE: JSON configuration file path
        AUTH_CONFIG_ENV_PREFIX: Environment prefix for configuration keys
        AUTH_DATA_PROTECTION_KEY: Protector master key (hidden from repr)
        AUTH_OPTIONS_CACHE_TTL: Options validity window in seconds
        AUTH_OPTIONS_CACHE_SIZE: Options cache size

    Example:
        >>> settings = AuthSettings()
        >>> settings.schemes_section
        'Authentication:Schemes'
        >>> settings.default_scheme
        'Bearer'
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    schemes_section: str = Field(
        default=DEFAULT_SCHEMES_SECTION,
        min_length=1,
        description="Configuration path holding one subtree per scheme",
    )
    default_scheme: str = Field(
        default="Bearer",
        description="Scheme materialized when no name is given",
    )
    config_file: Path | None = Field(
        default=None,
        description="Optional JSON file with the configuration tree",
    )
    config_env_prefix: str = Field(
        default="TESSERA_",
        description="Prefix of environment variables merged into the configuration tree",
    )
    data_protection_key: str = Field(
        default="",
        repr=False,  # Security: never log the master key
        description="Master key for ticket protectors",
    )
    options_cache_ttl: float | None = Field(
        default=None,
        ge=1,
        description="Validity window for built options in seconds; None keeps them until invalidated",
    )
    options_cache_size: int = Field(
        default=128,
        ge=1,
        le=10000,
        description="Maximum number of cached schemes",
    )

    @field_validator("schemes_section")
    @classmethod
    def strip_delimiters(cls, v: str) -> str:
        """Remove leading/trailing path delimiters.

        Raises:
            ValueError: If nothing is left after stripping.
        """
        stripped = v.strip(":")
        if not stripped:
            raise ValueError("schemes_section must name a configuration path")
        return stripped

    def load_configuration(self) -> ConfigurationSection:
        """Build the configuration tree: JSON file first, then environment.

        Returns:
            Merged configuration root.

        Raises:
            ConfigurationError: If ``config_file`` is set but unreadable.
        """
        sources: list[ConfigurationSection] = []
        if self.config_file is not None:
            sources.append(ConfigurationSection.from_json_file(self.config_file))
        sources.append(ConfigurationSection.from_environ(os.environ, self.config_env_prefix))
        logger.debug(
            "auth_configuration_loaded",
            extra={"sources": len(sources), "config_file": str(self.config_file or "")},
        )
        return ConfigurationSection.merge(*sources)


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """Get singleton AuthSettings instance.

    Cached for performance - settings are loaded once per application lifecycle.
    Clear cache with ``get_auth_settings.cache_clear()`` for testing.

    Returns:
        AuthSettings instance with configuration from environment.
    """
    return AuthSettings()
