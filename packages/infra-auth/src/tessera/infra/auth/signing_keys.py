"""Per-issuer signing key resolution.

Matches the configured issuer allow-list against ``SigningKeys`` entries and
decodes at most one symmetric key per issuer. Missing entries are skipped;
entries that are present but carry a corrupt value abort configuration.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tessera.foundation.domain.exceptions import KeyDecodeError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from tessera.foundation.domain.ports import ConfigurationSectionPort

logger = logging.getLogger(__name__)

ISSUER_KEY = "Issuer"
VALUE_KEY = "Value"


@dataclass(frozen=True, slots=True)
class SigningKeyEntry:
    """One configured signing key candidate.

    Attributes:
        issuer: Issuer the key belongs to.
        value: Base64-encoded key material. None when the entry has no value.
    """

    issuer: str | None
    value: str | None = None

    def __repr__(self) -> str:
        return f"SigningKeyEntry(issuer={self.issuer!r}, value=<redacted>)"


def signing_key_entries(section: ConfigurationSectionPort) -> list[SigningKeyEntry]:
    """Read ``{Issuer, Value}`` children of a ``SigningKeys`` section."""
    return [
        SigningKeyEntry(issuer=child.get(ISSUER_KEY), value=child.get(VALUE_KEY))
        for child in section.get_children()
    ]


def resolve_issuer_signing_keys(
    issuers: Sequence[str | None],
    candidates: Iterable[SigningKeyEntry],
) -> list[bytes]:
    """Resolve at most one decoded signing key per issuer.

    For each issuer, in order, the first candidate with an equal issuer is
    used. Issuers without a candidate, or whose candidate has no value,
    contribute no key.

    Args:
        issuers: Issuer allow-list in configuration order.
        candidates: Configured signing key entries.

    Returns:
        Decoded key bytes, one per matched issuer, in issuer order.

    Raises:
        KeyDecodeError: If a matched entry's value is not valid base64 or
            decodes to an empty key.

    Example:
        >>> resolve_issuer_signing_keys(
        ...     ["a", "b"], [SigningKeyEntry("a", "c2VjcmV0")]
        ... )
        [b'secret']
    """
    by_issuer: dict[str | None, SigningKeyEntry] = {}
    for candidate in candidates:
        by_issuer.setdefault(candidate.issuer, candidate)

    keys: list[bytes] = []
    for issuer in issuers:
        entry = by_issuer.get(issuer)
        if entry is None or entry.value is None:
            logger.debug("issuer_signing_key_not_found", extra={"issuer": issuer})
            continue
        keys.append(_decode_key(str(issuer), entry.value))
    return keys


def _decode_key(issuer: str, value: str) -> bytes:
    try:
        key = base64.b64decode("".join(value.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyDecodeError(issuer, str(exc)) from exc
    if not key:
        raise KeyDecodeError(issuer, "key is empty")
    return key
