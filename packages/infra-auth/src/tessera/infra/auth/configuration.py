"""In-memory hierarchical configuration tree.

Configuration is held as a flat mapping of ``:``-separated paths to string
values, the shape produced by JSON files and ``__``-separated environment
variables alike. ``ConfigurationSection`` is a read-only view rooted at one
path of that mapping:

- Keys are case-insensitive; the first spelling seen is reported back.
- Lists become children keyed ``0..n-1``.
- Children are ordered numerically for integer keys (which come first),
  then case-insensitively by key.
- Merging sources lets later sources override earlier ones per path.

The tree is immutable once built, so sections can be shared freely between
threads.

Example:
    >>> root = ConfigurationSection.from_mapping(
    ...     {"Authentication": {"Schemes": {"Bearer": {"ValidIssuers": ["a", "b"]}}}}
    ... )
    >>> [c.value for c in root.get_section("authentication:schemes:bearer:ValidIssuers").get_children()]
    ['a', 'b']
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tessera.foundation.domain.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"
ENV_KEY_DELIMITER = "__"
DEFAULT_SCHEMES_SECTION = "Authentication:Schemes"

# normalized path -> (path as first written, value)
_Store = dict[str, tuple[str, str | None]]


def _normalize(path: str) -> str:
    return path.lower()


def _join(prefix: str, key: str) -> str:
    return f"{prefix}{KEY_DELIMITER}{key}" if prefix else key


def _scalar_to_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _flatten(data: Any, prefix: str, out: _Store) -> None:
    if isinstance(data, dict):
        for key, child in data.items():
            _flatten(child, _join(prefix, str(key)), out)
    elif isinstance(data, (list, tuple)):
        for index, child in enumerate(data):
            _flatten(child, _join(prefix, str(index)), out)
    elif prefix:
        normalized = _normalize(prefix)
        original = out[normalized][0] if normalized in out else prefix
        out[normalized] = (original, _scalar_to_str(data))


def _child_sort_key(key: str) -> tuple[int, int, str]:
    """Integer keys first in numeric order, then keys case-insensitively."""
    if key.isdigit():
        return (0, int(key), "")
    return (1, 0, key.lower())


class ConfigurationSection:
    """Read-only view of one node of a configuration tree.

    Args:
        store: Flat path/value store shared by every section of the tree.
        path: Path of this section; "" for the root.
    """

    __slots__ = ("_path", "_store")

    def __init__(self, store: _Store | None = None, path: str = "") -> None:
        self._store: _Store = store if store is not None else {}
        self._path = path

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ConfigurationSection:
        """Build a tree from nested dicts and lists.

        Scalars are converted with ``str()``, so booleans read back as
        ``"True"``/``"False"``.
        """
        store: _Store = {}
        _flatten(dict(data), "", store)
        return cls(store)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str | None]]) -> ConfigurationSection:
        """Build a tree from ``(path, value)`` pairs. Later pairs win."""
        store: _Store = {}
        for path, value in pairs:
            normalized = _normalize(path)
            original = store[normalized][0] if normalized in store else path
            store[normalized] = (original, value)
        return cls(store)

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = "",
    ) -> ConfigurationSection:
        """Build a tree from environment variables.

        Only variables starting with ``prefix`` (case-insensitive) are used;
        the prefix is stripped and ``__`` becomes the path delimiter, so
        ``TESSERA_Authentication__Schemes__Bearer__Authority`` maps to
        ``Authentication:Schemes:Bearer:Authority``.
        """
        source = os.environ if environ is None else environ
        prefix_lower = prefix.lower()
        pairs = [
            (name[len(prefix) :].replace(ENV_KEY_DELIMITER, KEY_DELIMITER), value)
            for name, value in sorted(source.items())
            if name.lower().startswith(prefix_lower) and len(name) > len(prefix)
        ]
        return cls.from_pairs(pairs)

    @classmethod
    def from_json_file(cls, path: str | Path) -> ConfigurationSection:
        """Build a tree from a JSON document whose top level is an object.

        Raises:
            ConfigurationError: If the file cannot be read or is not a JSON object.
        """
        file_path = Path(path)
        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ConfigurationError(
                "Configuration file could not be loaded",
                context={"path": str(file_path), "reason": str(exc)},
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration file must contain a JSON object",
                context={"path": str(file_path)},
            )
        logger.debug("configuration_file_loaded", extra={"path": str(file_path)})
        return cls.from_mapping(data)

    @staticmethod
    def merge(*sections: ConfigurationSection) -> ConfigurationSection:
        """Merge the stores of several trees; later trees override earlier ones."""
        store: _Store = {}
        for section in sections:
            for normalized, (original, value) in section._store.items():
                kept = store[normalized][0] if normalized in store else original
                store[normalized] = (kept, value)
        return ConfigurationSection(store)

    @property
    def key(self) -> str:
        """Last path segment of this section ("" for the root)."""
        return self._path.rsplit(KEY_DELIMITER, 1)[-1]

    @property
    def path(self) -> str:
        """Full path of this section."""
        return self._path

    @property
    def value(self) -> str | None:
        """Value stored at this node, or None."""
        if not self._path:
            return None
        entry = self._store.get(_normalize(self._path))
        return entry[1] if entry is not None else None

    def get(self, key: str) -> str | None:
        """Return the value at ``key`` relative to this section, or None."""
        entry = self._store.get(_normalize(_join(self._path, key)))
        return entry[1] if entry is not None else None

    def get_section(self, key: str) -> ConfigurationSection:
        """Return the subsection at ``key``. Missing sections are empty."""
        return ConfigurationSection(self._store, _join(self._path, key))

    def get_children(self) -> list[ConfigurationSection]:
        """Return the immediate children in configuration order."""
        prefix = _normalize(self._path) + KEY_DELIMITER if self._path else ""
        prefix_length = len(self._path) + 1 if self._path else 0
        seen: dict[str, str] = {}
        for normalized, (original, _) in self._store.items():
            if not normalized.startswith(prefix) or normalized == prefix:
                continue
            child_key = original[prefix_length:].split(KEY_DELIMITER, 1)[0]
            seen.setdefault(child_key.lower(), child_key)
        return [
            ConfigurationSection(self._store, _join(self._path, child_key))
            for child_key in sorted(seen.values(), key=_child_sort_key)
        ]

    def exists(self) -> bool:
        """Return True if this section has a value or any children."""
        return self.value is not None or bool(self.get_children())

    def __repr__(self) -> str:
        return f"ConfigurationSection(path={self._path!r}, value={self.value!r})"


class AuthenticationConfigurationProvider:
    """Resolves per-scheme subtrees below a schemes section.

    Args:
        configuration: Root of the configuration tree.
        schemes_section: Path of the section holding one child per scheme.

    Example:
        >>> provider = AuthenticationConfigurationProvider(root)
        >>> provider.get_scheme_configuration("Bearer").get("Authority")
    """

    def __init__(
        self,
        configuration: ConfigurationSection,
        schemes_section: str = DEFAULT_SCHEMES_SECTION,
    ) -> None:
        self._configuration = configuration
        self._schemes_section = schemes_section

    @property
    def schemes_section(self) -> str:
        return self._schemes_section

    def get_scheme_configuration(self, scheme: str) -> ConfigurationSection:
        """Return the subtree for ``scheme`` (empty if not configured)."""
        return self._configuration.get_section(_join(self._schemes_section, scheme))
