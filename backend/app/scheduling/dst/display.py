"""DST-aware rendering of lesson instants."""

from __future__ import annotations
from datetime import datetime
from typing import Optional

from .contracts import DSTDisplay
from .conversion import get_timezone_offset, safe_local_to_utc, safe_utc_to_local
from .core import DEFAULT_TIMEZONE, format_clock_time, is_lesson_affected_by_dst


def get_dst_aware_lesson_time(
    instant: datetime,
    tz: str = DEFAULT_TIMEZONE,
    pattern: Optional[str] = None,
) -> DSTDisplay:
    """
    Render `instant` in `tz` with its DST status and UTC offset label.

    DST is considered active when the offset at `instant` differs from the
    offset at local midnight on January 1 of the same year.

    Args:
        instant: Lesson instant (naive values are taken as UTC)
        tz: IANA timezone name
        pattern: Optional strftime pattern; defaults to '2:00 PM' style

    Returns:
        DSTDisplay with display text, DST flag, offset label and warning
    """
    local = safe_utc_to_local(instant, tz)
    display_time = local.strftime(pattern) if pattern else format_clock_time(local)

    january = safe_local_to_utc(datetime(local.year, 1, 1), tz)
    january_offset = get_timezone_offset(january, tz)
    current_offset = get_timezone_offset(instant, tz)

    dst_check = is_lesson_affected_by_dst(local, tz)

    return DSTDisplay(
        display_time=display_time,
        is_dst=current_offset != january_offset,
        offset_label=format_offset_label(current_offset),
        warning=dst_check.warning,
    )


def format_offset_label(offset_minutes: int) -> str:
    """'UTC-5', 'UTC+0', 'UTC+5.5'."""
    sign = "+" if offset_minutes >= 0 else "-"
    hours = abs(offset_minutes) / 60
    text = str(int(hours)) if abs(offset_minutes) % 60 == 0 else f"{hours:g}"
    return f"UTC{sign}{text}"
