"""Named options registry for bearer authentication schemes.

Owns the lifecycle of materialized ``JwtBearerOptions`` records: builds a
fresh record per scheme name on first use, keeps it until it is explicitly
invalidated (or its validity window elapses when a TTL is configured), and
hands the same snapshot to every caller in between.

Cache: cachetools ``LRUCache`` (or ``TTLCache`` when ``ttl`` is set),
guarded by a lock. Builds run outside the lock; when two threads build the
same name concurrently, the first stored record wins.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from cachetools import Cache, LRUCache, TTLCache  # type: ignore[import-untyped]

from tessera.foundation.domain.scheme import DEFAULT_SCHEME_NAME
from tessera.infra.auth.options import JwtBearerOptions

if TYPE_CHECKING:
    from collections.abc import Callable

    from tessera.infra.auth.configure_options import JwtBearerConfigureOptions

logger = logging.getLogger(__name__)


class OptionsRegistry:
    """Cache of configured options records keyed by scheme name.

    Args:
        configure_options: Builder applied to every fresh record.
        options_factory: Creates a default-initialized record.
        maxsize: Maximum number of cached schemes (default: 128).
        ttl: Optional validity window in seconds. None keeps records until
            invalidated.

    Example:
        >>> registry = OptionsRegistry(JwtBearerConfigureOptions(provider, protection))
        >>> registry.get("Bearer").token_validation_parameters.validate_issuer
        True
    """

    def __init__(
        self,
        configure_options: JwtBearerConfigureOptions,
        options_factory: Callable[[], JwtBearerOptions] = JwtBearerOptions,
        *,
        maxsize: int = 128,
        ttl: float | None = None,
    ) -> None:
        self._configure_options = configure_options
        self._options_factory = options_factory
        self._cache: Cache[str, JwtBearerOptions] = (
            TTLCache(maxsize=maxsize, ttl=ttl) if ttl is not None else LRUCache(maxsize=maxsize)
        )
        self._lock = threading.Lock()

    def get(self, name: str | None = DEFAULT_SCHEME_NAME) -> JwtBearerOptions:
        """Return the options for ``name``, building them on first use.

        Raises:
            ConfigurationError: If the scheme's configuration is malformed or
                the built record fails validation. Nothing is cached.
        """
        key = name or DEFAULT_SCHEME_NAME
        with self._lock:
            cached: JwtBearerOptions | None = self._cache.get(key)
        if cached is not None:
            return cached

        options = self._build(key)
        with self._lock:
            existing: JwtBearerOptions | None = self._cache.get(key)
            if existing is not None:
                return existing
            self._cache[key] = options
        return options

    def invalidate(self, name: str | None = DEFAULT_SCHEME_NAME) -> None:
        """Drop the cached record for ``name`` so the next ``get`` rebuilds it."""
        with self._lock:
            self._cache.pop(name or DEFAULT_SCHEME_NAME, None)
        logger.info("jwt_bearer_options_invalidated", extra={"scheme": name})

    def clear(self) -> None:
        """Drop every cached record."""
        with self._lock:
            self._cache.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._cache

    def _build(self, name: str) -> JwtBearerOptions:
        options = self._options_factory()
        try:
            self._configure_options.configure(options, name)
            options.validate()
        except Exception:
            logger.exception("jwt_bearer_options_build_failed", extra={"scheme": name})
            raise

        parameters = options.token_validation_parameters
        unmatched = len(parameters.valid_issuers) - len(parameters.issuer_signing_keys)
        if parameters.validate_issuer_signing_key and unmatched > 0:
            logger.warning(
                "jwt_bearer_issuers_without_signing_key",
                extra={"scheme": name, "unmatched_issuer_count": unmatched},
            )
        logger.info(
            "jwt_bearer_options_built",
            extra={
                "scheme": name,
                "issuer_count": len(parameters.valid_issuers),
                "audience_count": len(parameters.valid_audiences),
            },
        )
        return options
