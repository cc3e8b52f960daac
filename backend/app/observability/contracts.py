"""
Observability contracts and type definitions.
Types shared by metric creation, storage and the per-module collectors.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Generic, Optional, TypeVar, Union


class MetricType(Enum):
    """Supported OpenTelemetry metric types."""
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"


@dataclass(frozen=True)
class Metric:
    """
    Standardized metric structure for the scheduling platform.
    """
    name: str
    value: float
    labels: Dict[str, str]
    metric_type: MetricType
    timestamp: datetime
    unit: Optional[str] = None


T = TypeVar('T')
E = TypeVar('E')


@dataclass(frozen=True)
class Success(Generic[T]):
    """Success result wrapper."""
    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Failure result wrapper."""
    error: E


Result = Union[Success[T], Failure[E]]


@dataclass(frozen=True)
class MetricValidationError:
    """Metric validation error details."""
    field: str
    message: str
    value: Optional[str] = None
