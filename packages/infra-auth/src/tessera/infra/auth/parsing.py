"""Typed parsing of raw configuration strings.

Configuration values arrive as optional strings. ``parse_or_default`` keeps
the caller's current value when a key is absent or empty and otherwise
hands the raw string to a type-specific parser, letting parse failures
propagate so a bad value aborts scheme activation.

Duration grammar (both parsers)::

    [ws][-]{ d | [d.]hh:mm[:ss[.fffffff]] | d:hh:mm:ss[.fffffff] }[ws]

``parse_timespan_invariant`` only accepts ``.`` before the fraction digits;
``parse_timespan`` also accepts the decimal separator of the current locale.
"""

from __future__ import annotations

import locale
import re
from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, TypeVar

from tessera.foundation.domain.exceptions import FieldFormatError

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")

_TRUE_LITERAL = "true"
_FALSE_LITERAL = "false"

_DAYS_ONLY = re.compile(r"^\s*(?P<sign>-)?(?P<days>\d+)\s*$")

_MAX_HOURS = 23
_MAX_MINUTES = 59
_MAX_SECONDS = 59
_FRACTION_DIGITS = 7  # 100ns ticks


def parse_or_default(raw: str | None, parse: Callable[[str], T], fallback: T) -> T:
    """Parse ``raw`` or return ``fallback`` when it is None or empty.

    Args:
        raw: Raw configuration string, possibly missing.
        parse: Parser applied to non-empty input. Its exceptions propagate
            unmodified.
        fallback: Value returned for missing or empty input.

    Returns:
        The parsed value, or ``fallback``.

    Example:
        >>> parse_or_default("", parse_bool, True)
        True
        >>> parse_or_default("false", parse_bool, True)
        False
    """
    if not raw:
        return fallback
    return parse(raw)


def parse_string(raw: str) -> str:
    """Pass-through parser for string-typed fields."""
    return raw


def parse_bool(raw: str) -> bool:
    """Parse a boolean literal.

    Accepts ``true`` or ``false`` in any letter case, surrounded by optional
    whitespace.

    Raises:
        FieldFormatError: If ``raw`` is any other string.
    """
    literal = raw.strip().lower()
    if literal == _TRUE_LITERAL:
        return True
    if literal == _FALSE_LITERAL:
        return False
    raise FieldFormatError(raw, "bool")


def parse_timespan_invariant(raw: str) -> timedelta:
    """Parse a duration using ``.`` as the only fraction separator.

    Raises:
        FieldFormatError: If ``raw`` does not match the duration grammar or a
            component is out of range.
    """
    return _parse_timespan(raw, ".")


def parse_timespan(raw: str) -> timedelta:
    """Parse a duration honouring the current locale's decimal separator.

    Raises:
        FieldFormatError: If ``raw`` does not match the duration grammar or a
            component is out of range.
    """
    decimal_point = str(locale.localeconv()["decimal_point"]) or "."
    return _parse_timespan(raw, "".join(dict.fromkeys("." + decimal_point)))


@lru_cache(maxsize=8)
def _clock_patterns(fraction_separators: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    """Compile the clock-style duration patterns for a separator set."""
    separators = "".join(re.escape(sep) for sep in fraction_separators)
    fraction = rf"(?:[{separators}](?P<fraction>\d{{1,{_FRACTION_DIGITS}}}))?"
    dotted_days = re.compile(
        r"^\s*(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d+):(?P<minutes>\d+)"
        rf"(?::(?P<seconds>\d+){fraction})?\s*$"
    )
    colon_days = re.compile(
        r"^\s*(?P<sign>-)?(?P<days>\d+):(?P<hours>\d+):(?P<minutes>\d+)"
        rf":(?P<seconds>\d+){fraction}\s*$"
    )
    return dotted_days, colon_days


def _parse_timespan(raw: str, fraction_separators: str) -> timedelta:
    match = _DAYS_ONLY.match(raw)
    if match is not None:
        return _build_timedelta(raw, match.group("sign"), match.group("days"))

    for pattern in _clock_patterns(fraction_separators):
        match = pattern.match(raw)
        if match is not None:
            return _build_timedelta(
                raw,
                match.group("sign"),
                match.group("days"),
                match.group("hours"),
                match.group("minutes"),
                match.group("seconds"),
                match.group("fraction"),
            )

    raise FieldFormatError(raw, "duration")


def _build_timedelta(
    raw: str,
    sign: str | None,
    days: str | None,
    hours: str | None = None,
    minutes: str | None = None,
    seconds: str | None = None,
    fraction: str | None = None,
) -> timedelta:
    hour_value = int(hours or 0)
    minute_value = int(minutes or 0)
    second_value = int(seconds or 0)
    if hour_value > _MAX_HOURS or minute_value > _MAX_MINUTES or second_value > _MAX_SECONDS:
        raise FieldFormatError(raw, "duration", reason="component out of range")

    ticks = int(fraction.ljust(_FRACTION_DIGITS, "0")) if fraction else 0
    try:
        value = timedelta(
            days=int(days or 0),
            hours=hour_value,
            minutes=minute_value,
            seconds=second_value,
            microseconds=ticks / 10,
        )
    except OverflowError as exc:
        raise FieldFormatError(raw, "duration", reason="out of range") from exc
    return -value if sign else value
