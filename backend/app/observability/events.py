"""
Observability domain events.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .contracts import Metric


@dataclass(frozen=True)
class MetricRecorded:
    """
    Event emitted when a metric is successfully recorded.
    """
    metric: Metric
    recorded_at: datetime
    tenant: Optional[str] = None


@dataclass(frozen=True)
class MetricCollectionFailed:
    """
    Event emitted when metric storage fails.
    """
    metric_name: str
    error_message: str
    failed_at: datetime
    retry_count: int
    tenant: Optional[str] = None
