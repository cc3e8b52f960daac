"""
Observability Core - Pure Functions Only
NEVER include I/O operations in this module.

Deterministic metric construction and naming checks.
"""

import math
import re
from datetime import datetime, timezone
from typing import Dict, Optional

from .contracts import (
    Failure,
    Metric,
    MetricType,
    MetricValidationError,
    Result,
    Success,
)


# Standard metric naming conventions
METRIC_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")
RESERVED_LABEL_NAMES = {"__name__", "__value__", "__timestamp__"}


def create_metric(
    name: str,
    value: float,
    labels: Optional[Dict[str, str]] = None,
    metric_type: MetricType = MetricType.GAUGE,
    timestamp: Optional[datetime] = None,
    unit: Optional[str] = None,
) -> Result[Metric, MetricValidationError]:
    """
    Create a standardized metric with validation.

    Args:
        name: Dotted lowercase metric name, e.g. "dst.remediation.duration_ms"
        value: Numeric value (must be finite)
        labels: Optional key-value labels
        metric_type: Type of metric (counter, gauge, histogram)
        timestamp: Optional timestamp (defaults to now, UTC)
        unit: Optional unit description

    Returns:
        Result containing validated Metric or validation error
    """
    if not validate_metric_name(name):
        return Failure(
            MetricValidationError(
                "name",
                "Metric name must follow pattern: lowercase, underscores, dots for namespaces",
                name if isinstance(name, str) else None,
            )
        )

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return Failure(MetricValidationError("value", "Metric value must be numeric"))

    if not math.isfinite(value):
        return Failure(MetricValidationError("value", "Metric value must be finite"))

    clean_labels = labels or {}
    if not isinstance(clean_labels, dict):
        return Failure(MetricValidationError("labels", "Labels must be a dictionary"))

    for label_name in clean_labels:
        if label_name in RESERVED_LABEL_NAMES:
            return Failure(
                MetricValidationError(
                    "labels",
                    f"Label name '{label_name}' is reserved",
                    label_name
                )
            )

    return Success(
        Metric(
            name=name,
            value=float(value),
            labels=clean_labels,
            metric_type=metric_type,
            timestamp=timestamp or datetime.now(timezone.utc),
            unit=unit,
        )
    )


def validate_metric_name(name: str) -> bool:
    """Validate metric name follows the naming convention."""
    if not name or not isinstance(name, str):
        return False

    return bool(METRIC_NAME_PATTERN.match(name))
