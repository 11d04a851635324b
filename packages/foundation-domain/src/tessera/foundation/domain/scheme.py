"""Authentication scheme naming.

Scheme names are plain strings, unique per scheme. The empty string is
reserved for the default (unnamed) scheme, which is never configured from
the scheme configuration tree.
"""

from __future__ import annotations

DEFAULT_SCHEME_NAME: str = ""
