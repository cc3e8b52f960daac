"""
Automatic remediation of lessons that fall on a DST transition day.

Decision order per lesson:
    1. not on a transition day            -> UNAFFECTED
    2. policy.auto_reschedule + a free day -> RESCHEDULED
    3. policy.auto_adjust_time + a shift   -> TIME_ADJUSTED
    4. otherwise                           -> AFFECTED_NO_ACTION

The engine never raises; the worst outcome is AFFECTED_NO_ACTION with warnings.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from .contracts import (
    ChangeKind,
    HandlingRecommendations,
    RemediationOutcome,
    RemediationPolicy,
    RemediationState,
    RescheduleDirection,
    TransitionEdge,
    TransitionType,
)
from .conversion import get_timezone_offset, safe_local_to_utc, safe_utc_to_local
from .core import (
    DEFAULT_TIMEZONE,
    TransitionCalendar,
    format_clock_time,
    is_lesson_affected_by_dst,
    local_wall_clock,
)

logger = logging.getLogger(__name__)

# Wall-clock band that is skipped or repeated on transition days
AMBIGUOUS_HOURS = range(1, 4)
SAFE_HOUR = 4


def handle_dst_transition(
    lesson_date: datetime,
    tz: str = DEFAULT_TIMEZONE,
    policy: Optional[RemediationPolicy] = None,
    calendar: Optional[TransitionCalendar] = None,
) -> RemediationOutcome:
    """
    Decide how to handle a lesson scheduled at `lesson_date` in `tz`.

    Naive dates are wall-clock times in `tz`; aware dates are stored instants.
    Adjusted dates are returned as aware datetimes in `tz`.
    """
    policy = policy or RemediationPolicy()
    calendar = calendar or TransitionCalendar()

    try:
        return _remediate(lesson_date, tz, policy, calendar)
    except Exception as e:
        logger.exception(f"DST remediation failed for {lesson_date!r} in {tz}")
        return remediation_failure(lesson_date, str(e))


def find_alternative_date(
    lesson_date: datetime,
    policy: RemediationPolicy,
    calendar: Optional[TransitionCalendar] = None,
) -> Optional[datetime]:
    """
    Nearest day within `policy.max_reschedule_days` that is not a transition day.

    With EITHER, the earlier candidate wins over the later one at the same
    distance. Candidates keep the lesson's wall-clock time and are judged by
    their own calendar day. None when the search is exhausted.
    """
    calendar = calendar or TransitionCalendar()
    direction = policy.preferred_direction

    look_before = direction in (RescheduleDirection.BEFORE, RescheduleDirection.EITHER)
    look_after = direction in (RescheduleDirection.AFTER, RescheduleDirection.EITHER)

    for offset in range(1, policy.max_reschedule_days + 1):
        candidates: List[datetime] = []
        if look_before:
            candidates.append(lesson_date - timedelta(days=offset))
        if look_after:
            candidates.append(lesson_date + timedelta(days=offset))

        for candidate in candidates:
            day_only = candidate.replace(tzinfo=None)
            if not is_lesson_affected_by_dst(day_only, DEFAULT_TIMEZONE, calendar).affected:
                return candidate

    return None


def adjust_time_for_dst(
    lesson_date: datetime,
    tz: str = DEFAULT_TIMEZONE,
    calendar: Optional[TransitionCalendar] = None,
) -> Optional[datetime]:
    """
    Shift the stored instant so the lesson keeps its booked local time.

    A lesson is stored with the offset in force before the transition and
    drifts by the size of the clock change: fall back shifts the instant +1h,
    spring forward -1h. The result shows the booked wall-clock time on the
    transition day; a shift that would leave that day is not applied.

    Off transition days, a lesson in the 01:00-03:59 band moves to 04:MM:SS
    the same day. Transition branches take precedence. None when nothing
    applies.
    """
    calendar = calendar or TransitionCalendar()

    local = local_wall_clock(lesson_date, tz)
    dst_check = is_lesson_affected_by_dst(local, tz, calendar)

    if dst_check.affected:
        edge = calendar.edge_for(dst_check.transition_type, local.year)
        booked = booked_wall_clock(lesson_date, tz, edge)
        stored = booked.replace(tzinfo=_pre_transition_offset(edge, tz))
        shifted = stored.astimezone(timezone.utc) - timedelta(hours=edge.offset_change_hours)
        adjusted = safe_utc_to_local(shifted, tz)

        if adjusted.date() != edge.at.date():
            return None
        if lesson_date.tzinfo is not None and adjusted == lesson_date:
            return None
        return adjusted

    if local.hour in AMBIGUOUS_HOURS:
        moved = local.replace(hour=SAFE_HOUR, tzinfo=None)
        return safe_utc_to_local(safe_local_to_utc(moved, tz), tz)

    return None


def get_dst_handling_recommendations(
    lesson_date: datetime, tz: str = DEFAULT_TIMEZONE
) -> HandlingRecommendations:
    """Recommendations and a suggested policy for a lesson."""
    local = local_wall_clock(lesson_date, tz)
    dst_check = is_lesson_affected_by_dst(local, tz)

    if not dst_check.affected:
        return HandlingRecommendations(
            recommendations=("No DST issues detected",),
            policy=RemediationPolicy(auto_reschedule=False, auto_adjust_time=False),
        )

    recommendations = []
    if dst_check.transition_type == TransitionType.FALL:
        recommendations.append("Consider rescheduling to avoid time repetition confusion")
        recommendations.append(
            "If keeping the date, clearly communicate the time to avoid confusion"
        )
    else:
        recommendations.append("Consider rescheduling to avoid time jump confusion")
        recommendations.append(
            "If keeping the date, ensure all parties understand the time change"
        )

    in_band = local.hour in AMBIGUOUS_HOURS
    if in_band:
        recommendations.append(
            "Consider moving to a different time to avoid DST transition hours"
        )

    return HandlingRecommendations(
        recommendations=tuple(recommendations),
        policy=RemediationPolicy(auto_reschedule=True, auto_adjust_time=in_band),
    )


def remediation_failure(lesson_date: Any, error: str) -> RemediationOutcome:
    """AFFECTED_NO_ACTION outcome carrying an error as warning."""
    return RemediationOutcome(
        original_date=lesson_date,
        change_kind=ChangeKind.NO_CHANGE,
        state=RemediationState.AFFECTED_NO_ACTION,
        reason="DST remediation could not be completed",
        original_local_time=(
            format_clock_time(lesson_date)
            if isinstance(lesson_date, datetime)
            else str(lesson_date)
        ),
        warnings=(f"DST remediation failed: {error}",),
    )


def _remediate(
    lesson_date: datetime,
    tz: str,
    policy: RemediationPolicy,
    calendar: TransitionCalendar,
) -> RemediationOutcome:
    local = local_wall_clock(lesson_date, tz)
    original_time = format_clock_time(local)
    dst_check = is_lesson_affected_by_dst(local, tz, calendar)

    if not dst_check.affected:
        return RemediationOutcome(
            original_date=lesson_date,
            change_kind=ChangeKind.NO_CHANGE,
            state=RemediationState.UNAFFECTED,
            reason="No DST transition detected",
            original_local_time=original_time,
        )

    edge = calendar.edge_for(dst_check.transition_type, local.year)
    original_time = format_clock_time(booked_wall_clock(lesson_date, tz, edge))
    warnings = (dst_check.warning or "DST transition detected",)
    reason = "DST transition detected but no automatic handling applied"

    if policy.auto_reschedule:
        rescheduled = find_alternative_date(local, policy, calendar)
        if rescheduled is not None:
            notifications = ()
            if policy.notify_users:
                notifications = (
                    f"Lesson automatically rescheduled from {_short_date(local)} "
                    f"to {_short_date(rescheduled)} to avoid DST transition",
                )
            return RemediationOutcome(
                original_date=lesson_date,
                change_kind=ChangeKind.RESCHEDULED,
                state=RemediationState.RESCHEDULED,
                reason=(
                    "Automatically rescheduled from DST transition day to "
                    f"{rescheduled:%A, %B} {rescheduled.day}"
                ),
                original_local_time=original_time,
                adjusted_date=rescheduled,
                adjusted_local_time=format_clock_time(rescheduled),
                warnings=warnings,
                notifications=notifications,
            )

        reason = (
            f"No unaffected date found within {policy.max_reschedule_days} day(s) "
            f"({policy.preferred_direction.value} the transition)"
        )
        logger.info(f"{reason} for lesson at {local.isoformat()}")

    if policy.auto_adjust_time:
        adjusted = adjust_time_for_dst(lesson_date, tz, calendar)
        if adjusted is not None:
            adjusted_time = format_clock_time(local_wall_clock(adjusted, tz))
            notifications = ()
            if policy.notify_users:
                notifications = (
                    f"Lesson time automatically adjusted from {original_time} "
                    f"to {adjusted_time} to avoid DST transition",
                )
            return RemediationOutcome(
                original_date=lesson_date,
                change_kind=ChangeKind.TIME_ADJUSTED,
                state=RemediationState.TIME_ADJUSTED,
                reason="Automatically adjusted time to avoid DST transition confusion",
                original_local_time=original_time,
                adjusted_date=adjusted,
                adjusted_local_time=adjusted_time,
                warnings=warnings,
                notifications=notifications,
            )

    return RemediationOutcome(
        original_date=lesson_date,
        change_kind=ChangeKind.NO_CHANGE,
        state=RemediationState.AFFECTED_NO_ACTION,
        reason=reason,
        original_local_time=original_time,
        warnings=warnings,
    )


def booked_wall_clock(lesson_date: datetime, tz: str, edge: TransitionEdge) -> datetime:
    """
    Naive wall-clock time a transition-day lesson was booked at.

    Naive values and values carrying the lesson's own zone state it directly.
    Other aware values are instants stored with the offset in force before
    the transition.
    """
    if lesson_date.tzinfo is None:
        return lesson_date
    if getattr(lesson_date.tzinfo, "key", None) == tz:
        return lesson_date.replace(tzinfo=None)
    return lesson_date.astimezone(_pre_transition_offset(edge, tz)).replace(tzinfo=None)


def _pre_transition_offset(edge: TransitionEdge, tz: str) -> timezone:
    # UTC when the zone is unknown
    day_before = safe_local_to_utc(edge.at - timedelta(days=1), tz)
    return timezone(timedelta(minutes=get_timezone_offset(day_before, tz)))


def _short_date(value: datetime) -> str:
    return f"{value:%b} {value.day}"
