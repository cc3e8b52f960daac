"""
Test the DST shell module - batch remediation and event publishing.
"""

import logging
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from ..contracts import (
    EventRef,
    Failure,
    RemediationPolicy,
    RemediationState,
    Success,
)
from ..events import (
    DSTRemediationFailed,
    DSTRemediationSkipped,
    LessonRescheduled,
    LessonTimeAdjusted,
)
from ..shell import apply_batch, remediate_and_publish

EDT = timezone(timedelta(hours=-4))


@pytest.fixture
def lessons():
    """One lesson per remediation path."""
    return [
        EventRef(id="normal", date=datetime(2025, 6, 10, 15, 0)),
        EventRef(id="fall", date=datetime(2025, 11, 2, 14, 0, tzinfo=EDT)),
        EventRef(id="spring", date=datetime(2025, 3, 9, 10, 0), timezone="America/New_York"),
    ]


class TestApplyBatch:
    """Test per-lesson isolation and ordering."""

    def test_empty_batch(self):
        """Empty input yields empty output."""
        assert apply_batch([]) == []

    def test_order_and_count_preserved(self, lessons):
        """Outputs correspond 1:1 with inputs."""
        items = apply_batch(lessons)

        assert [item.event_id for item in items] == ["normal", "fall", "spring"]
        assert items[0].outcome.state == RemediationState.UNAFFECTED
        assert items[1].outcome.state == RemediationState.TIME_ADJUSTED
        assert all(item.error is None for item in items)

    def test_malformed_lesson_does_not_abort_batch(self, lessons, caplog):
        """A lesson without a date is reported and the rest still run."""
        batch = [lessons[0], object(), lessons[1]]

        items = apply_batch(batch)

        assert len(items) == 3
        assert items[1].event_id is None
        assert items[1].error is not None
        assert items[1].outcome.state == RemediationState.AFFECTED_NO_ACTION
        assert items[2].outcome.state == RemediationState.TIME_ADJUSTED
        assert "DST remediation failed" in caplog.text

    def test_policy_applies_to_every_lesson(self, lessons):
        """Reschedule policy moves both transition-day lessons."""
        policy = RemediationPolicy(auto_reschedule=True, auto_adjust_time=False)

        items = apply_batch(lessons, policy)

        assert items[1].outcome.state == RemediationState.RESCHEDULED
        assert items[2].outcome.adjusted_date == datetime(2025, 3, 8, 10, 0)

    def test_default_timezone_used_when_lesson_has_none(self):
        """03:00 UTC Nov 3 is Nov 2 in New York but Nov 3 in London."""
        lesson = EventRef(id="late", date=datetime(2025, 11, 3, 3, 0, tzinfo=timezone.utc))

        new_york = apply_batch([lesson])
        london = apply_batch([lesson], default_timezone="Europe/London")

        assert new_york[0].outcome.state == RemediationState.TIME_ADJUSTED
        assert london[0].outcome.state == RemediationState.UNAFFECTED


class TestRemediateAndPublish:
    """Test domain event emission."""

    @pytest.mark.asyncio
    async def test_publishes_one_event_per_affected_lesson(self, lessons):
        """Unaffected lessons emit nothing."""
        publisher = AsyncMock()

        result = await remediate_and_publish(lessons, publisher=publisher)

        assert isinstance(result, Success)
        assert len(result.value) == 3
        assert publisher.await_count == 2

        published = [call.args[0] for call in publisher.await_args_list]
        assert isinstance(published[0], LessonTimeAdjusted)
        assert published[0].lesson_id == "fall"
        assert published[0].adjusted_local_time == "2:00 PM"

    @pytest.mark.asyncio
    async def test_event_types_follow_state(self, lessons):
        """Rescheduled, skipped and failed lessons map to their events."""
        publisher = AsyncMock()
        batch = [lessons[1], object()]

        await remediate_and_publish(
            batch,
            RemediationPolicy(auto_reschedule=True, auto_adjust_time=False),
            publisher,
        )
        rescheduled, failed = [call.args[0] for call in publisher.await_args_list]
        assert isinstance(rescheduled, LessonRescheduled)
        assert isinstance(failed, DSTRemediationFailed)

        publisher.reset_mock()
        await remediate_and_publish(
            [lessons[1]],
            RemediationPolicy(auto_reschedule=False, auto_adjust_time=False),
            publisher,
        )
        skipped = publisher.await_args.args[0]
        assert isinstance(skipped, DSTRemediationSkipped)
        assert skipped.warnings

    @pytest.mark.asyncio
    async def test_default_publisher_logs(self, lessons, caplog):
        """Without a publisher events are logged."""
        with caplog.at_level(logging.INFO):
            result = await remediate_and_publish(lessons)

        assert isinstance(result, Success)
        assert "EVENT: LessonTimeAdjusted" in caplog.text

    @pytest.mark.asyncio
    async def test_publisher_error_returns_failure(self, lessons):
        """Publishing errors are reported, not raised."""
        publisher = AsyncMock(side_effect=ConnectionError("broker unavailable"))

        result = await remediate_and_publish(lessons, publisher=publisher)

        assert isinstance(result, Failure)
        assert "broker unavailable" in result.error
