"""Structured logging configuration using structlog.

Library modules log through the standard library
(``logging.getLogger(__name__)`` with snake_case event names and ``extra=``
fields). ``configure_logging`` renders those records and native structlog
events through one processor chain:

- JSON output in production, colored console output elsewhere
- Redaction of key material, secrets and tokens

Usage:
    from tessera.infra.observability import configure_logging, get_logger

    configure_logging()
    get_logger(__name__).info("scheme_loaded", scheme="Bearer")
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Literal

import structlog
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from collections.abc import MutableMapping

Processor = structlog.types.Processor
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Exact field names; compound names are caught by _SENSITIVE_MARKERS.
SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "authorization",
        "bearer",
        "credential",
        "signing_key",
        "key_value",
        "master_key",
        "data_protection_key",
    }
)
_SENSITIVE_MARKERS = ("password", "token", "secret")

REDACTED_VALUE: str = "***REDACTED***"

STDLIB_HANDLER_NAME = "tessera-structlog"


class LoggingSettings(BaseSettings):
    """Logging settings read from ``LOG_LEVEL`` and ``ENVIRONMENT``.

    Example:
        >>> LoggingSettings(log_level="debug", environment="production").use_json_logs
        True
    """

    model_config = SettingsConfigDict(extra="ignore")

    log_level: LogLevel = "INFO"
    environment: str = "development"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @property
    def use_json_logs(self) -> bool:
        return self.environment == "production"

    @property
    def log_level_int(self) -> int:
        return logging.getLevelName(self.log_level)


class SensitiveDataProcessor:
    """Replace the values of sensitive event keys with ``REDACTED_VALUE``.

    A key is sensitive when it is one of ``SENSITIVE_FIELDS`` or contains
    password, token or secret. Count fields (``signing_key_count``) pass
    through.

    Example:
        >>> SensitiveDataProcessor()(None, "info", {"signing_key": "c2VjcmV0"})
        {'signing_key': '***REDACTED***'}
    """

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        for key in [k for k in event_dict if _is_sensitive(k)]:
            event_dict[key] = REDACTED_VALUE
        return event_dict


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    if lowered in SENSITIVE_FIELDS:
        return True
    if lowered.endswith("_count"):
        return False
    return any(marker in lowered for marker in _SENSITIVE_MARKERS)


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Cached settings; ``get_logging_settings.cache_clear()`` in tests."""
    return LoggingSettings()


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Configure structlog and route standard library records through it.

    One handler named ``STDLIB_HANDLER_NAME`` is kept on the root logger;
    calling this again replaces it. ``extra`` fields of stdlib records
    become event keys and pass the same redaction as structlog events.

    Args:
        settings: Settings to apply. Defaults to ``get_logging_settings()``.
    """
    settings = settings or get_logging_settings()
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if settings.use_json_logs
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            *shared,
            SensitiveDataProcessor(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_int),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.set_name(STDLIB_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                *shared,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.ExtraAdder(),
                SensitiveDataProcessor(),
            ],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == STDLIB_HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(settings.log_level_int)


def get_logger(name: str | None = None) -> structlog.typing.WrappedLogger:
    """Return a structlog logger, bound to ``logger=name`` when given."""
    logger = structlog.get_logger()
    return logger.bind(logger=name) if name is not None else logger
