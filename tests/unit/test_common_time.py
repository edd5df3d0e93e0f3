"""Unit tests for time helpers and the UTC column type."""

from __future__ import annotations

import datetime as dt

import pytest

from mergewatch.common.storage import TimezoneAwareRequiredError, UTCDateTime
from mergewatch.common.time import parse_github_timestamp, utcnow


def test_utcnow_is_aware_utc() -> None:
    """utcnow() returns an aware UTC datetime."""
    now = utcnow()
    assert now.tzinfo is not None, "expected tz-aware datetime"
    assert now.utcoffset() == dt.timedelta(0), "expected UTC offset"


class TestParseGithubTimestamp:
    """Tests for parse_github_timestamp."""

    def test_parses_zulu_suffix(self) -> None:
        """GitHub's Z suffix is read as UTC."""
        parsed = parse_github_timestamp("2026-02-13T10:00:00Z")
        assert parsed == dt.datetime(2026, 2, 13, 10, 0, tzinfo=dt.UTC)

    def test_converts_offsets_to_utc(self) -> None:
        """Non-UTC offsets are normalized to UTC."""
        parsed = parse_github_timestamp("2026-02-13T12:00:00+02:00")
        assert parsed == dt.datetime(2026, 2, 13, 10, 0, tzinfo=dt.UTC)
        assert parsed is not None
        assert parsed.tzinfo == dt.UTC, "expected UTC tzinfo"

    def test_none_passes_through(self) -> None:
        """None is returned for absent timestamps."""
        assert parse_github_timestamp(None) is None

    @pytest.mark.parametrize("value", ["2026-02-13T10:00:00", "yesterday", ""])
    def test_rejects_naive_or_invalid(self, value: str) -> None:
        """Naive and unparsable values raise ValueError."""
        with pytest.raises(ValueError):  # noqa: PT011 - message varies by cause
            parse_github_timestamp(value)


class TestUTCDateTime:
    """Tests for the UTCDateTime column type."""

    def test_bind_rejects_naive(self) -> None:
        """Binding a naive datetime raises."""
        column_type = UTCDateTime()
        with pytest.raises(TimezoneAwareRequiredError):
            column_type.process_bind_param(dt.datetime(2026, 1, 1), dialect=None)  # type: ignore[arg-type]

    def test_result_restores_utc(self) -> None:
        """Naive values read back from SQLite are tagged as UTC."""
        column_type = UTCDateTime()
        value = column_type.process_result_value(
            dt.datetime(2026, 1, 1, 9, 30),
            dialect=None,  # type: ignore[arg-type]
        )
        assert value == dt.datetime(2026, 1, 1, 9, 30, tzinfo=dt.UTC)
