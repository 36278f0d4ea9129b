"""Tests for utils/timezone.py - UTC-everywhere time handling."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from utils.timezone import fixed_offset, local_to_utc, now_utc, parse_iso, to_offset, to_utc


class TestNowUtc:
    """Tests for now_utc()."""

    def test_returns_timezone_aware(self):
        """Result must have tzinfo set (not naive)."""
        assert now_utc().tzinfo is not None

    def test_is_utc(self):
        """Result timezone must be specifically UTC."""
        assert now_utc().tzinfo == timezone.utc


class TestToUtc:
    """Tests for to_utc()."""

    def test_raises_on_naive(self):
        """Naive datetime must raise ValueError."""
        with pytest.raises(ValueError, match="naive"):
            to_utc(datetime(2024, 1, 1, 12, 0, 0))

    def test_converts_other_timezone(self):
        """Santiago 12:00 in January (UTC-3, summer time) becomes UTC 15:00."""
        santiago = datetime(2024, 1, 1, 12, 0, 0, tzinfo=ZoneInfo("America/Santiago"))
        result = to_utc(santiago)
        assert result.tzinfo == timezone.utc
        assert result.hour == 15

    def test_utc_passes_through(self):
        utc_time = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        assert to_utc(utc_time) == utc_time


class TestFixedOffset:

    def test_minutes_to_tzinfo(self):
        assert fixed_offset(-240).utcoffset(None) == timedelta(hours=-4)

    @pytest.mark.parametrize("minutes", [-1440, 1440, 5000])
    def test_out_of_range(self, minutes):
        with pytest.raises(ValueError, match="out of range"):
            fixed_offset(minutes)


class TestToOffset:
    """Tests for to_offset() - display-side conversion."""

    def test_converts_correctly(self):
        """UTC 14:30 is 10:30 at UTC-4."""
        result = to_offset(datetime(2024, 12, 25, 14, 30, tzinfo=timezone.utc), -240)
        assert (result.hour, result.minute) == (10, 30)
        assert result.utcoffset() == timedelta(hours=-4)

    def test_crosses_midnight(self):
        result = to_offset(datetime(2024, 1, 2, 2, 0, tzinfo=timezone.utc), -240)
        assert (result.day, result.hour) == (1, 22)

    def test_raises_on_naive(self):
        with pytest.raises(ValueError, match="naive"):
            to_offset(datetime(2024, 1, 1, 12, 0, 0), -240)


class TestLocalToUtc:

    def test_wall_clock_to_utc(self):
        assert local_to_utc(datetime(2024, 12, 25, 10, 30), -240) == datetime(
            2024, 12, 25, 14, 30, tzinfo=timezone.utc
        )

    def test_positive_offset(self):
        assert local_to_utc(datetime(2024, 1, 1, 12, 0), 330) == datetime(2024, 1, 1, 6, 30, tzinfo=timezone.utc)

    def test_rejects_aware_input(self):
        with pytest.raises(ValueError, match="naive"):
            local_to_utc(datetime(2024, 1, 1, tzinfo=timezone.utc), -240)


class TestParseIso:
    """Tests for parse_iso()."""

    def test_handles_zulu(self):
        result = parse_iso("2024-01-01T12:00:00Z")
        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_handles_offset(self):
        """12:00-04:00 is 16:00 UTC."""
        result = parse_iso("2024-01-01T12:00:00-04:00")
        assert result.tzinfo == timezone.utc
        assert result.hour == 16

    def test_raises_on_naive(self):
        with pytest.raises(ValueError, match="timezone"):
            parse_iso("2024-01-01T12:00:00")
