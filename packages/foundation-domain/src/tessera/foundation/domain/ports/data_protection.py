"""Port interfaces for purpose-scoped data protection.

A data protection provider hands out protectors bound to a purpose path.
Payloads protected under one purpose path cannot be unprotected under
another, which keeps bearer and refresh token payloads non-interchangeable.

Example:
    >>> from tessera.foundation.domain.ports import DataProtectionProviderPort
    >>> def bearer_protector(provider: DataProtectionProviderPort, scheme: str):
    ...     return provider.create_protector("JWTBearerToken", scheme, "BearerToken")
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DataProtectorPort(Protocol):
    """Port for a protector bound to one purpose path.

    Implementations must be thread-safe and have no side effects beyond
    their own key material.
    """

    @property
    def purposes(self) -> tuple[str, ...]:
        """The purpose path this protector is bound to."""
        ...

    def protect(self, plaintext: bytes) -> bytes:
        """Encrypt and authenticate ``plaintext``."""
        ...

    def unprotect(self, protected: bytes) -> bytes:
        """Reverse ``protect``.

        Raises:
            Adapter-specific exception if the payload was tampered with or
            was produced under a different purpose path.
        """
        ...


@runtime_checkable
class DataProtectionProviderPort(Protocol):
    """Port for creating purpose-scoped protectors."""

    def create_protector(self, *purposes: str) -> DataProtectorPort:
        """Return a protector bound to ``purposes``.

        Args:
            *purposes: Purpose path segments, outermost first. At least one.
        """
        ...
