"""Port interface for hierarchical configuration sources.

This module defines the ConfigurationSectionPort protocol: a read-only,
string-keyed tree where every node may carry a value and any number of
children. Scheme option builders depend on this port only, so tests can
supply in-memory fakes.

Example:
    >>> from tessera.foundation.domain.ports import ConfigurationSectionPort
    >>> def read_authority(section: ConfigurationSectionPort) -> str | None:
    ...     return section.get("Authority")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class ConfigurationSectionPort(Protocol):
    """Port for one node of a hierarchical configuration tree.

    Implementations must be safe for concurrent reads. Lookups never raise
    for missing keys: ``get`` returns None and ``get_section`` returns an
    empty section.
    """

    @property
    def key(self) -> str:
        """Last path segment of this section ("" for the root)."""
        ...

    @property
    def path(self) -> str:
        """Full ``:``-separated path of this section."""
        ...

    @property
    def value(self) -> str | None:
        """Value stored at this node, or None."""
        ...

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` relative to this section."""
        ...

    def get_section(self, key: str) -> ConfigurationSectionPort:
        """Return the subsection at ``key`` (possibly empty)."""
        ...

    def get_children(self) -> Sequence[ConfigurationSectionPort]:
        """Return the immediate child sections in configuration order."""
        ...


@runtime_checkable
class SchemeConfigurationProviderPort(Protocol):
    """Port resolving the configuration subtree of an authentication scheme."""

    def get_scheme_configuration(self, scheme: str) -> ConfigurationSectionPort | None:
        """Return the subtree for ``scheme``, or None if there is none."""
        ...
