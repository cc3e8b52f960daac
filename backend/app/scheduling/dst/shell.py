"""Batch remediation of stored lessons and hand-off of the resulting domain events."""

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from .contracts import (
    BatchRemediationItem,
    Failure,
    RemediationPolicy,
    RemediationState,
    Result,
    Success,
)
from .core import DEFAULT_TIMEZONE, TransitionCalendar
from .events import (
    DSTRemediationFailed,
    DSTRemediationSkipped,
    LessonRescheduled,
    LessonTimeAdjusted,
)
from .remediation import handle_dst_transition, remediation_failure

logger = logging.getLogger(__name__)

EventPublisher = Callable[[Any], Awaitable[None]]


def apply_batch(
    events: Iterable[Any],
    policy: Optional[RemediationPolicy] = None,
    default_timezone: Optional[str] = None,
) -> List[BatchRemediationItem]:
    """
    Remediate each lesson independently, preserving input order.

    A malformed lesson yields an AFFECTED_NO_ACTION item with `error` set;
    it never aborts the rest of the batch.
    """
    policy = policy or RemediationPolicy()
    default_timezone = default_timezone or DEFAULT_TIMEZONE
    calendar = TransitionCalendar()

    items = []
    for event in events:
        event_id = getattr(event, "id", None)
        try:
            tz = getattr(event, "timezone", None) or default_timezone
            outcome = handle_dst_transition(event.date, tz, policy, calendar)
            items.append(BatchRemediationItem(event_id=event_id, outcome=outcome))

        except Exception as e:
            logger.error(
                f"DST remediation failed for lesson {event_id}: {e}", exc_info=True
            )
            items.append(
                BatchRemediationItem(
                    event_id=event_id,
                    outcome=remediation_failure(getattr(event, "date", None), str(e)),
                    error=str(e),
                )
            )

    return items


async def remediate_and_publish(
    events: Iterable[Any],
    policy: Optional[RemediationPolicy] = None,
    publisher: Optional[EventPublisher] = None,
    default_timezone: Optional[str] = None,
) -> Result[List[BatchRemediationItem], str]:
    """
    Run a batch and emit one domain event per affected lesson.

    Persisting adjusted dates and delivering notifications stays with the
    subscribers of these events.
    """
    publisher = publisher or _log_event

    try:
        items = apply_batch(events, policy, default_timezone)

        for item in items:
            event = _build_domain_event(item)
            if event is not None:
                await publisher(event)

        return Success(items)

    except Exception as e:
        error_msg = f"DST batch remediation failed: {str(e)}"
        logger.error(error_msg)
        return Failure(error_msg)


def _build_domain_event(item: BatchRemediationItem) -> Optional[Any]:
    outcome = item.outcome
    now = datetime.now(timezone.utc)

    if item.error is not None:
        return DSTRemediationFailed(
            lesson_id=item.event_id,
            error_message=item.error,
            occurred_at=now,
        )

    if outcome.state == RemediationState.RESCHEDULED:
        return LessonRescheduled(
            lesson_id=item.event_id,
            original_date=outcome.original_date,
            adjusted_date=outcome.adjusted_date,
            reason=outcome.reason,
            notifications=outcome.notifications,
            occurred_at=now,
        )

    if outcome.state == RemediationState.TIME_ADJUSTED:
        return LessonTimeAdjusted(
            lesson_id=item.event_id,
            original_date=outcome.original_date,
            adjusted_date=outcome.adjusted_date,
            original_local_time=outcome.original_local_time,
            adjusted_local_time=outcome.adjusted_local_time,
            notifications=outcome.notifications,
            occurred_at=now,
        )

    if outcome.state == RemediationState.AFFECTED_NO_ACTION:
        return DSTRemediationSkipped(
            lesson_id=item.event_id,
            original_date=outcome.original_date,
            reason=outcome.reason,
            warnings=outcome.warnings,
            occurred_at=now,
        )

    return None


async def _log_event(event: Any) -> None:
    logger.info(f"EVENT: {event}")
