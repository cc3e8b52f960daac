"""Domain events for DST lesson remediation."""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class LessonRescheduled:
    """Event: Lesson was moved off a DST transition day."""

    lesson_id: Optional[str]
    original_date: Any
    adjusted_date: datetime
    reason: str
    notifications: tuple[str, ...]
    occurred_at: datetime


@dataclass(frozen=True)
class LessonTimeAdjusted:
    """Event: Lesson instant was shifted to keep its displayed local time."""

    lesson_id: Optional[str]
    original_date: Any
    adjusted_date: datetime
    original_local_time: str
    adjusted_local_time: str
    notifications: tuple[str, ...]
    occurred_at: datetime


@dataclass(frozen=True)
class DSTRemediationSkipped:
    """Event: Lesson is on a transition day but no automatic handling applied."""

    lesson_id: Optional[str]
    original_date: Any
    reason: str
    warnings: tuple[str, ...]
    occurred_at: datetime


@dataclass(frozen=True)
class DSTRemediationFailed:
    """Event: Lesson could not be processed in a batch run."""

    lesson_id: Optional[str]
    error_message: str
    occurred_at: datetime
