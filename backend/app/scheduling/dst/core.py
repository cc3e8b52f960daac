"""Pure functions for DST transition dates, lesson detection and scheduling validation."""

from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Dict, Optional

from .contracts import (
    DetectionResult,
    TransitionEdge,
    TransitionInfo,
    TransitionPair,
    TransitionRule,
    TransitionType,
    ValidationResult,
    US_DST_RULE,
)
from .conversion import safe_utc_to_local

DEFAULT_TIMEZONE = "America/New_York"

SPRING_FORWARD_WARNING = (
    "Lesson scheduled on DST spring forward day. Time will jump from 2:00 AM to 3:00 AM."
)
FALL_BACK_WARNING = (
    "Lesson scheduled on DST fall back day. Time will repeat from 2:00 AM to 1:00 AM."
)
TRANSITION_HOUR_WARNING = (
    "Lesson scheduled during DST transition hour. This may cause confusion."
)

# Local hours flagged by the validator on a transition day
TRANSITION_HOURS = (1, 2)


def get_dst_transitions(year: int, rule: TransitionRule = US_DST_RULE) -> TransitionPair:
    """
    Compute both transitions of `year`.

    Spring forward is the `spring_ordinal`-th Sunday of `spring_month`,
    fall back the `fall_ordinal`-th Sunday of `fall_month`, both at
    `transition_hour` local time.
    """
    spring_day = _nth_sunday(year, rule.spring_month, rule.spring_ordinal)
    fall_day = _nth_sunday(year, rule.fall_month, rule.fall_ordinal)

    spring_at = datetime(year, spring_day.month, spring_day.day, rule.transition_hour)
    fall_at = datetime(year, fall_day.month, fall_day.day, rule.transition_hour)

    return TransitionPair(
        year=year,
        spring_forward=TransitionEdge(
            at=spring_at,
            offset_change_hours=1,
            transition_type=TransitionType.SPRING,
            clock_time=format_clock_time(spring_at),
        ),
        fall_back=TransitionEdge(
            at=fall_at,
            offset_change_hours=-1,
            transition_type=TransitionType.FALL,
            clock_time=format_clock_time(fall_at),
        ),
    )


class TransitionCalendar:
    """Per-instance year → TransitionPair memo for one rule."""

    def __init__(self, rule: TransitionRule = US_DST_RULE):
        self.rule = rule
        self._by_year: Dict[int, TransitionPair] = {}

    def transitions(self, year: int) -> TransitionPair:
        pair = self._by_year.get(year)
        if pair is None:
            pair = get_dst_transitions(year, self.rule)
            self._by_year[year] = pair
        return pair

    def edge_for(self, transition_type: TransitionType, year: int) -> TransitionEdge:
        pair = self.transitions(year)
        if transition_type == TransitionType.SPRING:
            return pair.spring_forward
        return pair.fall_back


def is_within_transition_window(
    lesson_date: datetime,
    tz: str = DEFAULT_TIMEZONE,
    calendar: Optional[TransitionCalendar] = None,
) -> bool:
    """
    Broad caution check: True when the lesson's calendar day is within
    one day (inclusive) of either transition day of its year.
    """
    calendar = calendar or TransitionCalendar()
    day = local_wall_clock(lesson_date, tz).date()
    pair = calendar.transitions(day.year)

    return any(
        abs((day - edge.at.date()).days) <= 1
        for edge in (pair.spring_forward, pair.fall_back)
    )


def is_lesson_affected_by_dst(
    lesson_date: datetime,
    tz: str = DEFAULT_TIMEZONE,
    calendar: Optional[TransitionCalendar] = None,
) -> DetectionResult:
    """
    Exact remediation trigger: the lesson's calendar day equals a transition day.
    """
    calendar = calendar or TransitionCalendar()
    day = local_wall_clock(lesson_date, tz).date()
    pair = calendar.transitions(day.year)

    if day == pair.spring_forward.at.date():
        return DetectionResult(
            affected=True,
            transition_type=TransitionType.SPRING,
            transition_date=pair.spring_forward.at,
            warning=SPRING_FORWARD_WARNING,
        )

    if day == pair.fall_back.at.date():
        return DetectionResult(
            affected=True,
            transition_type=TransitionType.FALL,
            transition_date=pair.fall_back.at,
            warning=FALL_BACK_WARNING,
        )

    return DetectionResult(affected=False)


def validate_lesson_scheduling(
    lesson_date: datetime,
    tz: str = DEFAULT_TIMEZONE,
    calendar: Optional[TransitionCalendar] = None,
) -> ValidationResult:
    """Advisory DST check for a prospective lesson time."""
    warnings = []
    suggestions = []

    local = local_wall_clock(lesson_date, tz)
    dst_check = is_lesson_affected_by_dst(local, tz, calendar)

    if dst_check.transition_type == TransitionType.FALL:
        warnings.append(FALL_BACK_WARNING)
        suggestions.append(
            "Consider scheduling the lesson for a different day to avoid confusion."
        )
        suggestions.append(
            "If scheduling is necessary, clearly communicate the time to avoid confusion."
        )
    elif dst_check.transition_type == TransitionType.SPRING:
        warnings.append(SPRING_FORWARD_WARNING)
        suggestions.append(
            "Consider scheduling the lesson for a different day to avoid the time jump."
        )

    if dst_check.affected and local.hour in TRANSITION_HOURS:
        warnings.append(TRANSITION_HOUR_WARNING)
        suggestions.append(
            "Consider scheduling for a different time to avoid DST transition issues."
        )

    return ValidationResult(
        valid=len(warnings) == 0,
        warnings=tuple(warnings),
        suggestions=tuple(suggestions),
    )


def get_dst_transition_info(
    year: int, rule: TransitionRule = US_DST_RULE
) -> TransitionInfo:
    """Transition dates and descriptions for display to users."""
    pair = get_dst_transitions(year, rule)
    spring = pair.spring_forward
    fall = pair.fall_back

    jumped_to = spring.at + timedelta(hours=spring.offset_change_hours)
    repeated_from = fall.at + timedelta(hours=fall.offset_change_hours)

    return TransitionInfo(
        year=year,
        spring_forward_date=format_long_date(spring.at),
        spring_forward_time=spring.clock_time,
        spring_forward_description=(
            f"Clocks spring forward 1 hour ({spring.clock_time} becomes "
            f"{format_clock_time(jumped_to)})"
        ),
        fall_back_date=format_long_date(fall.at),
        fall_back_time=fall.clock_time,
        fall_back_description=(
            f"Clocks fall back 1 hour ({fall.clock_time} becomes "
            f"{format_clock_time(repeated_from)})"
        ),
    )


def local_wall_clock(value: datetime, tz: str) -> datetime:
    """
    Wall-clock view of a lesson date in `tz`.

    Naive values already are wall-clock times and are returned as is;
    aware values are converted (best effort, see conversion module).
    """
    if value.tzinfo is None:
        return value
    return safe_utc_to_local(value, tz)


def format_clock_time(value: datetime) -> str:
    """12-hour clock, e.g. '2:00 PM'."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {meridiem}"


def format_long_date(value: date) -> str:
    """e.g. 'Sunday, March 9, 2025'."""
    return f"{value:%A, %B} {value.day}, {value.year}"


def _nth_sunday(year: int, month: int, ordinal: int) -> date:
    first = date(year, month, 1)
    # weekday(): Monday is 0, Sunday is 6
    first_sunday = first + timedelta(days=(6 - first.weekday()) % 7)
    return first_sunday + timedelta(weeks=ordinal - 1)
