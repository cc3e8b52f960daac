"""
DST handling for lesson scheduling.

This module provides:
- Transition dates per year from a pluggable Nth-Sunday rule
- Exact-day and ±1 day transition detection
- Local/UTC conversion that degrades instead of raising
- Automatic remediation: reschedule, time adjustment or advisory warning
- Batch remediation with per-lesson failure isolation
"""

from .core import (
    DEFAULT_TIMEZONE,
    TransitionCalendar,
    get_dst_transitions,
    get_dst_transition_info,
    is_lesson_affected_by_dst,
    is_within_transition_window,
    validate_lesson_scheduling,
)
from .contracts import (
    BatchRemediationItem,
    ChangeKind,
    DetectionResult,
    EventRef,
    RemediationOutcome,
    RemediationPolicy,
    RemediationState,
    RescheduleDirection,
    TransitionRule,
    TransitionType,
    US_DST_RULE,
)
from .conversion import (
    convert_local_to_utc,
    convert_utc_to_local,
    safe_local_to_utc,
    safe_utc_to_local,
)
from .display import get_dst_aware_lesson_time
from .remediation import (
    adjust_time_for_dst,
    find_alternative_date,
    get_dst_handling_recommendations,
    handle_dst_transition,
)
from .shell import apply_batch, remediate_and_publish

__all__ = [
    "DEFAULT_TIMEZONE",
    "TransitionCalendar",
    "get_dst_transitions",
    "get_dst_transition_info",
    "is_lesson_affected_by_dst",
    "is_within_transition_window",
    "validate_lesson_scheduling",
    "BatchRemediationItem",
    "ChangeKind",
    "DetectionResult",
    "EventRef",
    "RemediationOutcome",
    "RemediationPolicy",
    "RemediationState",
    "RescheduleDirection",
    "TransitionRule",
    "TransitionType",
    "US_DST_RULE",
    "convert_local_to_utc",
    "convert_utc_to_local",
    "safe_local_to_utc",
    "safe_utc_to_local",
    "get_dst_aware_lesson_time",
    "adjust_time_for_dst",
    "find_alternative_date",
    "get_dst_handling_recommendations",
    "handle_dst_transition",
    "apply_batch",
    "remediate_and_publish",
]
