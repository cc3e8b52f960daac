"""Contracts for DST transition detection and lesson remediation."""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar('T')
E = TypeVar('E')

@dataclass(frozen=True)
class Success(Generic[T]):
    """Success result with value."""
    value: T

@dataclass(frozen=True)
class Failure(Generic[E]):
    """Failure result with error."""
    error: E

Result = Union[Success[T], Failure[E]]

class TransitionType(Enum):
    """Direction of a DST clock change."""
    SPRING = "spring"
    FALL = "fall"

class RescheduleDirection(Enum):
    """Which side of the transition day to look for a new date."""
    BEFORE = "before"
    AFTER = "after"
    EITHER = "either"

class ChangeKind(Enum):
    """Kind of change applied to a lesson."""
    RESCHEDULED = "rescheduled"
    TIME_ADJUSTED = "time_adjusted"
    NO_CHANGE = "no_change"

class RemediationState(Enum):
    """Terminal state reached by the remediation engine."""
    UNAFFECTED = "unaffected"
    AFFECTED_NO_ACTION = "affected_no_action"
    RESCHEDULED = "rescheduled"
    TIME_ADJUSTED = "time_adjusted"

@dataclass(frozen=True)
class TransitionRule:
    """Nth-Sunday transition rule. Defaults match US/Canada."""
    spring_month: int = 3
    spring_ordinal: int = 2
    fall_month: int = 11
    fall_ordinal: int = 1
    transition_hour: int = 2

US_DST_RULE = TransitionRule()

@dataclass(frozen=True)
class TransitionEdge:
    """A single clock change. `at` is the naive local wall-clock time."""
    at: datetime
    offset_change_hours: int
    transition_type: TransitionType
    clock_time: str

@dataclass(frozen=True)
class TransitionPair:
    """Both transitions of one year."""
    year: int
    spring_forward: TransitionEdge
    fall_back: TransitionEdge

@dataclass(frozen=True)
class DetectionResult:
    """Whether a lesson date lands on a transition day."""
    affected: bool
    transition_type: Optional[TransitionType] = None
    transition_date: Optional[datetime] = None
    warning: Optional[str] = None

@dataclass(frozen=True)
class ValidationResult:
    """Advisory scheduling check. Never blocks lesson creation."""
    valid: bool
    warnings: tuple[str, ...]
    suggestions: tuple[str, ...]

@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a resilient timezone conversion."""
    value: datetime
    timezone_used: Optional[str]
    fallback_used: bool = False
    passthrough: bool = False
    warnings: tuple[str, ...] = ()

@dataclass(frozen=True)
class DSTDisplay:
    """DST-aware rendering of an instant."""
    display_time: str
    is_dst: bool
    offset_label: str
    warning: Optional[str] = None

@dataclass(frozen=True)
class RemediationPolicy:
    """Caller-supplied remediation settings."""
    auto_reschedule: bool = False
    auto_adjust_time: bool = True
    preferred_direction: RescheduleDirection = RescheduleDirection.BEFORE
    max_reschedule_days: int = 3
    notify_users: bool = True

    def __post_init__(self):
        """Coerce the direction; raises ValueError for an unknown one."""
        object.__setattr__(
            self, 'preferred_direction', RescheduleDirection(self.preferred_direction)
        )

@dataclass(frozen=True)
class RemediationOutcome:
    """Result of remediating one lesson, handed to persistence/notification."""
    original_date: Any
    change_kind: ChangeKind
    state: RemediationState
    reason: str
    original_local_time: str
    adjusted_date: Optional[datetime] = None
    adjusted_local_time: Optional[str] = None
    warnings: tuple[str, ...] = ()
    notifications: tuple[str, ...] = ()

@dataclass(frozen=True)
class EventRef:
    """Reference to a stored lesson. Owned by the caller."""
    id: str
    date: datetime
    timezone: Optional[str] = None

@dataclass(frozen=True)
class BatchRemediationItem:
    """Per-lesson entry of a batch run."""
    event_id: Optional[str]
    outcome: RemediationOutcome
    error: Optional[str] = None

@dataclass(frozen=True)
class TransitionInfo:
    """User-facing description of a year's transitions."""
    year: int
    spring_forward_date: str
    spring_forward_time: str
    spring_forward_description: str
    fall_back_date: str
    fall_back_time: str
    fall_back_description: str

@dataclass(frozen=True)
class HandlingRecommendations:
    """Suggested handling for a lesson and the policy that would apply it."""
    recommendations: tuple[str, ...]
    policy: RemediationPolicy

@dataclass(frozen=True)
class DSTSettings:
    """DST settings resolved from the environment."""
    default_timezone: str
    fallback_timezone: Optional[str]
    policy: RemediationPolicy

class ConfigError(Exception):
    pass

class ConfigValidationError(ConfigError):
    def __init__(self, key: str, message: str):
        self.key = key
        self.message = message
        super().__init__(f"Configuration validation error for '{key}': {message}")
