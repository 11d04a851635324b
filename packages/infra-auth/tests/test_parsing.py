"""Tests for typed configuration value parsing."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tessera.foundation.domain.exceptions import FieldFormatError
from tessera.infra.auth.parsing import (
    parse_bool,
    parse_or_default,
    parse_string,
    parse_timespan,
    parse_timespan_invariant,
)


@pytest.mark.unit
class TestParseOrDefault:
    def test_none_returns_fallback(self) -> None:
        assert parse_or_default(None, int, 7) == 7

    def test_empty_returns_fallback(self) -> None:
        assert parse_or_default("", int, 7) == 7

    def test_parses_non_empty(self) -> None:
        assert parse_or_default("12", int, 7) == 12

    def test_whitespace_is_not_empty(self) -> None:
        assert parse_or_default(" ", parse_string, "default") == " "

    def test_parse_errors_propagate_unmodified(self) -> None:
        error = RuntimeError("boom")

        def failing(raw: str) -> int:
            raise error

        with pytest.raises(RuntimeError) as exc_info:
            parse_or_default("x", failing, 0)
        assert exc_info.value is error

    def test_parser_not_called_for_missing_value(self) -> None:
        calls: list[str] = []
        parse_or_default(None, calls.append, None)
        assert calls == []


@pytest.mark.unit
class TestParseBool:
    @pytest.mark.parametrize("raw", ["true", "True", "TRUE", " true "])
    def test_true_literals(self, raw: str) -> None:
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", ["false", "False", "FALSE", "\tfalse\n"])
    def test_false_literals(self, raw: str) -> None:
        assert parse_bool(raw) is False

    @pytest.mark.parametrize("raw", ["yes", "1", "0", "no", "tru", "t"])
    def test_other_values_rejected(self, raw: str) -> None:
        with pytest.raises(FieldFormatError, match="bool"):
            parse_bool(raw)


@pytest.mark.unit
class TestParseTimespanInvariant:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("00:00:30", timedelta(seconds=30)),
            ("00:01", timedelta(minutes=1)),
            ("10:00", timedelta(hours=10)),
            ("5", timedelta(days=5)),
            ("1.02:03:04", timedelta(days=1, hours=2, minutes=3, seconds=4)),
            ("1.02:03:04.5", timedelta(days=1, hours=2, minutes=3, seconds=4.5)),
            ("00:00:00.0000010", timedelta(microseconds=1)),
            ("1:02:03:04", timedelta(days=1, hours=2, minutes=3, seconds=4)),
            ("-00:01:00", timedelta(minutes=-1)),
            ("  00:05:00  ", timedelta(minutes=5)),
        ],
    )
    def test_valid_formats(self, raw: str, expected: timedelta) -> None:
        assert parse_timespan_invariant(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["notaduration", "1.5", "00:00:01,5", "1h", "PT5M", "00:00:00.12345678", ":30"],
    )
    def test_malformed_rejected(self, raw: str) -> None:
        with pytest.raises(FieldFormatError, match="duration"):
            parse_timespan_invariant(raw)

    @pytest.mark.parametrize("raw", ["24:00:00", "00:60:00", "00:00:60"])
    def test_out_of_range_components_rejected(self, raw: str) -> None:
        with pytest.raises(FieldFormatError) as exc_info:
            parse_timespan_invariant(raw)
        assert exc_info.value.context["reason"] == "component out of range"

    def test_overflow_rejected(self) -> None:
        with pytest.raises(FieldFormatError):
            parse_timespan_invariant("99999999999")


@pytest.mark.unit
class TestParseTimespanCurrentLocale:
    def test_accepts_invariant_format(self) -> None:
        assert parse_timespan("00:00:01.5") == timedelta(seconds=1.5)

    def test_accepts_locale_decimal_separator(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "tessera.infra.auth.parsing.locale.localeconv",
            lambda: {"decimal_point": ","},
        )
        assert parse_timespan("00:00:01,5") == timedelta(seconds=1.5)
        assert parse_timespan("00:00:01.5") == timedelta(seconds=1.5)

    def test_invariant_parser_ignores_locale(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "tessera.infra.auth.parsing.locale.localeconv",
            lambda: {"decimal_point": ","},
        )
        with pytest.raises(FieldFormatError):
            parse_timespan_invariant("00:00:01,5")

    def test_malformed_rejected(self) -> None:
        with pytest.raises(FieldFormatError):
            parse_timespan("notaduration")
