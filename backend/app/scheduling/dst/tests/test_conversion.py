"""Tests for resilient timezone conversion and DST-aware display."""

import logging
import pytest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from ..conversion import (
    convert_local_to_utc,
    convert_utc_to_local,
    get_timezone_offset,
    safe_local_to_utc,
    safe_utc_to_local,
)
from ..core import FALL_BACK_WARNING
from ..display import format_offset_label, get_dst_aware_lesson_time

NEW_YORK = "America/New_York"


class TestLocalToUTC:
    """Test local wall-clock → instant conversion."""

    def test_summer_afternoon(self):
        """EDT is UTC-4."""
        result = convert_local_to_utc(datetime(2025, 7, 1, 14, 0), NEW_YORK)

        assert result.value == datetime(2025, 7, 1, 18, 0, tzinfo=timezone.utc)
        assert result.timezone_used == NEW_YORK
        assert result.fallback_used is False
        assert result.passthrough is False
        assert result.warnings == ()

    def test_aware_input_is_normalised(self):
        """Aware inputs are already instants."""
        aware = datetime(2025, 7, 1, 14, 0, tzinfo=ZoneInfo(NEW_YORK))

        assert safe_local_to_utc(aware, "Not/AZone") == datetime(2025, 7, 1, 18, 0, tzinfo=timezone.utc)

    def test_nonexistent_time_passes_through(self, caplog):
        """02:30 on spring forward day does not exist in New York."""
        local = datetime(2025, 3, 9, 2, 30)

        with caplog.at_level(logging.WARNING):
            result = convert_local_to_utc(local, NEW_YORK)

        assert result.passthrough is True
        assert result.timezone_used is None
        assert result.value == local.replace(tzinfo=timezone.utc)
        assert "does not exist" in result.warnings[0]
        assert "last resort" in caplog.text

    def test_ambiguous_time_uses_fallback(self):
        """01:30 on fall back day is ambiguous; Phoenix has no DST."""
        result = convert_local_to_utc(
            datetime(2025, 11, 2, 1, 30), NEW_YORK, fallback_tz="America/Phoenix"
        )

        assert result.fallback_used is True
        assert result.timezone_used == "America/Phoenix"
        assert result.value == datetime(2025, 11, 2, 8, 30, tzinfo=timezone.utc)
        assert "ambiguous" in result.warnings[0]

    def test_unknown_timezone_uses_fallback(self):
        """Unknown zone key falls back."""
        result = convert_local_to_utc(datetime(2025, 7, 1, 14, 0), "Not/AZone", "UTC")

        assert result.fallback_used is True
        assert result.value == datetime(2025, 7, 1, 14, 0, tzinfo=timezone.utc)

    def test_fallback_equal_to_primary_is_skipped(self):
        """Retrying the same zone is pointless."""
        result = convert_local_to_utc(datetime(2025, 3, 9, 2, 30), NEW_YORK, NEW_YORK)

        assert result.fallback_used is False
        assert result.passthrough is True
        assert len(result.warnings) == 2

    def test_both_timezones_failing(self):
        """Primary and fallback failing ends in passthrough."""
        result = convert_local_to_utc(datetime(2025, 7, 1, 14, 0), "Not/AZone", "Also/Bad")

        assert result.passthrough is True
        assert len(result.warnings) == 3

    def test_never_raises_on_garbage(self):
        """Non-datetime input is returned unchanged."""
        assert safe_local_to_utc("not a date", NEW_YORK) == "not a date"
        assert safe_local_to_utc(datetime(2025, 7, 1), None) == datetime(2025, 7, 1, tzinfo=timezone.utc)


class TestUTCToLocal:
    """Test instant → local conversion."""

    def test_winter_instant(self):
        """EST is UTC-5."""
        local = safe_utc_to_local(datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc), NEW_YORK)

        assert local.replace(tzinfo=None) == datetime(2025, 1, 15, 12, 0)
        assert local.tzinfo.key == NEW_YORK

    def test_naive_instant_is_utc(self):
        """Naive instants are taken as UTC."""
        local = safe_utc_to_local(datetime(2025, 1, 15, 17, 0), NEW_YORK)

        assert local.hour == 12

    def test_unknown_timezone_passes_through(self):
        """Instant is returned unchanged as last resort."""
        instant = datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc)
        result = convert_utc_to_local(instant, "Not/AZone")

        assert result.passthrough is True
        assert result.value is instant

    def test_fallback_timezone(self):
        """Fallback zone is used when the primary is unknown."""
        instant = datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc)
        result = convert_utc_to_local(instant, "Not/AZone", "Europe/Brussels")

        assert result.fallback_used is True
        assert result.value.hour == 18

    @pytest.mark.parametrize("local", [
        datetime(2025, 1, 15, 9, 0),
        datetime(2025, 3, 9, 4, 0),
        datetime(2025, 3, 9, 1, 59),
        datetime(2025, 7, 4, 23, 45),
        datetime(2025, 11, 2, 0, 30),
        datetime(2025, 11, 2, 3, 0),
        datetime(2025, 12, 31, 23, 59),
    ])
    def test_round_trip_outside_transition_band(self, local):
        """absolute_to_local(local_to_absolute(x)) == x away from the band."""
        instant = safe_local_to_utc(local, NEW_YORK)

        assert safe_utc_to_local(instant, NEW_YORK).replace(tzinfo=None) == local


class TestTimezoneOffset:
    """Test offset lookup."""

    def test_offsets_in_minutes(self):
        assert get_timezone_offset(datetime(2025, 1, 15, tzinfo=timezone.utc), NEW_YORK) == -300
        assert get_timezone_offset(datetime(2025, 7, 15, tzinfo=timezone.utc), NEW_YORK) == -240
        assert get_timezone_offset(datetime(2025, 7, 15, tzinfo=timezone.utc), "Asia/Kolkata") == 330

    def test_unknown_zone_is_zero(self):
        """UTC passthrough has zero offset."""
        assert get_timezone_offset(datetime(2025, 7, 15, tzinfo=timezone.utc), "Not/AZone") == 0


class TestDSTAwareDisplay:
    """Test display strings, DST flag and offset labels."""

    def test_summer_lesson(self):
        """July in New York is DST."""
        display = get_dst_aware_lesson_time(datetime(2025, 7, 1, 18, 0, tzinfo=timezone.utc))

        assert display.display_time == "2:00 PM"
        assert display.is_dst is True
        assert display.offset_label == "UTC-4"
        assert display.warning is None

    def test_winter_lesson(self):
        """January in New York is standard time."""
        display = get_dst_aware_lesson_time(datetime(2025, 1, 15, 19, 0, tzinfo=timezone.utc))

        assert display.display_time == "2:00 PM"
        assert display.is_dst is False
        assert display.offset_label == "UTC-5"

    def test_fall_back_day_warning(self):
        """Lesson on fall back day carries the detector warning."""
        display = get_dst_aware_lesson_time(datetime(2025, 11, 2, 19, 0, tzinfo=timezone.utc))

        assert display.display_time == "2:00 PM"
        assert display.is_dst is False
        assert display.warning == FALL_BACK_WARNING

    def test_half_hour_zone_without_dst(self):
        """India has a fractional offset and no DST."""
        display = get_dst_aware_lesson_time(
            datetime(2025, 6, 1, 8, 30, tzinfo=timezone.utc), "Asia/Kolkata"
        )

        assert display.display_time == "2:00 PM"
        assert display.is_dst is False
        assert display.offset_label == "UTC+5.5"

    def test_custom_pattern(self):
        """strftime pattern overrides the 12-hour clock."""
        display = get_dst_aware_lesson_time(
            datetime(2025, 7, 1, 18, 0, tzinfo=timezone.utc), NEW_YORK, "%H:%M"
        )

        assert display.display_time == "14:00"

    @pytest.mark.parametrize("minutes,label", [
        (0, "UTC+0"),
        (-300, "UTC-5"),
        (60, "UTC+1"),
        (330, "UTC+5.5"),
        (-570, "UTC-9.5"),
        (345, "UTC+5.75"),
    ])
    def test_offset_label(self, minutes, label):
        assert format_offset_label(minutes) == label
