"""Purpose-scoped data protection for opaque ticket payloads.

``FernetDataProtectionProvider`` derives one Fernet key per purpose path
from a single master key with HKDF-SHA256, so a payload protected for
``("JWTBearerToken", "Bearer", "BearerToken")`` can never be read back by
the refresh token protector of the same scheme, or by another scheme.

``TicketDataFormat`` serializes ``AuthenticationTicket`` models to JSON and
protects them with one such protector.
"""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from pydantic import BaseModel, ConfigDict, Field, ValidationError

if TYPE_CHECKING:
    from tessera.foundation.domain.ports import DataProtectorPort

logger = logging.getLogger(__name__)

_KDF_SALT = b"tessera.data-protection.v1"
_PURPOSE_SEPARATOR = b"\x00"


def generate_master_key() -> str:
    """Return a fresh random master key suitable for the provider."""
    return Fernet.generate_key().decode("ascii")


class FernetDataProtector:
    """Protector bound to one purpose path.

    Args:
        fernet: Fernet instance keyed for ``purposes``.
        purposes: The purpose path this protector serves.
    """

    __slots__ = ("_fernet", "_purposes")

    def __init__(self, fernet: Fernet, purposes: tuple[str, ...]) -> None:
        self._fernet = fernet
        self._purposes = purposes

    @property
    def purposes(self) -> tuple[str, ...]:
        return self._purposes

    def protect(self, plaintext: bytes) -> bytes:
        return self._fernet.encrypt(plaintext)

    def unprotect(self, protected: bytes) -> bytes:
        """Decrypt a payload produced by ``protect``.

        Raises:
            cryptography.fernet.InvalidToken: If the payload was tampered with
                or protected under another purpose path.
        """
        return self._fernet.decrypt(protected)

    def __repr__(self) -> str:
        return f"FernetDataProtector(purposes={self._purposes!r})"


class FernetDataProtectionProvider:
    """Creates purpose-scoped protectors from one master key.

    Thread-safe: the provider holds only the immutable master key, and
    every protector it returns is independent.

    Args:
        master_key: Secret master key. Any non-empty string or bytes; use
            ``generate_master_key()`` for a random one.

    Raises:
        ValueError: If ``master_key`` is empty.

    Example:
        >>> provider = FernetDataProtectionProvider(generate_master_key())
        >>> protector = provider.create_protector("JWTBearerToken", "Bearer", "BearerToken")
        >>> protector.unprotect(protector.protect(b"payload"))
        b'payload'
    """

    def __init__(self, master_key: str | bytes) -> None:
        if not master_key:
            raise ValueError("Data protection master key is required")
        self._master_key = master_key.encode("utf-8") if isinstance(master_key, str) else master_key

    def create_protector(self, *purposes: str) -> FernetDataProtector:
        """Return a protector bound to ``purposes``.

        Raises:
            ValueError: If no purpose is given or a purpose is empty.
        """
        if not purposes or not all(purposes):
            raise ValueError("At least one non-empty purpose is required")

        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=_KDF_SALT,
            info=_PURPOSE_SEPARATOR.join(p.encode("utf-8") for p in purposes),
        )
        key = base64.urlsafe_b64encode(hkdf.derive(self._master_key))
        return FernetDataProtector(Fernet(key), tuple(purposes))


class AuthenticationTicket(BaseModel):
    """Ticket-shaped payload carried inside protected tokens.

    Attributes:
        authentication_scheme: Scheme that issued the ticket.
        claims: Principal claims.
        properties: Free-form string properties (e.g., redirect targets).
        issued_utc: Issue instant, if recorded.
        expires_utc: Expiry instant, if recorded.
    """

    model_config = ConfigDict(frozen=True)

    authentication_scheme: str
    claims: dict[str, Any] = Field(default_factory=dict)
    properties: dict[str, str] = Field(default_factory=dict)
    issued_utc: datetime | None = None
    expires_utc: datetime | None = None


class TicketDataFormat:
    """Serializes and protects authentication tickets.

    Args:
        protector: Protector bound to the purpose path of this format.
    """

    def __init__(self, protector: DataProtectorPort) -> None:
        self._protector = protector

    @property
    def protector(self) -> DataProtectorPort:
        return self._protector

    @property
    def purposes(self) -> tuple[str, ...]:
        return self._protector.purposes

    def protect(self, ticket: AuthenticationTicket) -> str:
        """Return ``ticket`` as a protected, URL-safe string."""
        protected = self._protector.protect(ticket.model_dump_json().encode("utf-8"))
        return base64.urlsafe_b64encode(protected).rstrip(b"=").decode("ascii")

    def unprotect(self, protected_text: str) -> AuthenticationTicket | None:
        """Recover a ticket, or None if the text cannot be trusted.

        Tampered payloads, payloads protected under another purpose path,
        and malformed input all yield None.
        """
        try:
            padded = protected_text + "=" * (-len(protected_text) % 4)
            payload = self._protector.unprotect(base64.urlsafe_b64decode(padded))
            return AuthenticationTicket.model_validate_json(payload)
        except (binascii.Error, ValueError, InvalidToken, ValidationError):
            logger.debug("ticket_unprotect_failed", extra={"purposes": self.purposes})
            return None

    def __repr__(self) -> str:
        return f"TicketDataFormat(purposes={self.purposes!r})"
