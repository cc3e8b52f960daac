"""
Observability integration for DST lesson remediation.
Collects metrics for batch remediation outcomes and conversion fallbacks.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from ...observability.contracts import MetricType
from ...observability.integration import TrackedOperation, get_tracer
from ...observability.shell import ObservabilityStorage, record_metric
from .contracts import BatchRemediationItem, ConversionResult, RemediationPolicy
from .shell import apply_batch

logger = logging.getLogger(__name__)

tracer = get_tracer("scheduling.dst")


class DSTObservabilityCollector:
    """
    Collects observability metrics for the DST remediation module.
    """

    def __init__(self, storage: Optional[ObservabilityStorage] = None):
        self.storage = storage

    async def track_batch_remediation(
        self,
        items: List[BatchRemediationItem],
        duration_ms: float,
    ) -> None:
        """
        Track one batch run.

        Args:
            items: Items returned by apply_batch
            duration_ms: Wall time of the batch
        """
        try:
            await self._record_metric(
                name="dst.remediation.batch.duration_ms",
                value=duration_ms,
                metric_type=MetricType.HISTOGRAM,
                labels={"batch_size": str(len(items))},
            )

            states = Counter(item.outcome.state.value for item in items)
            for state, count in sorted(states.items()):
                await self._record_metric(
                    name="dst.remediation.outcomes.total",
                    value=float(count),
                    metric_type=MetricType.COUNTER,
                    labels={"state": state},
                )

            failures = sum(1 for item in items if item.error is not None)
            if failures:
                await self._record_metric(
                    name="dst.remediation.failures.total",
                    value=float(failures),
                    metric_type=MetricType.COUNTER,
                )

        except Exception as e:
            logger.error(f"Failed to track DST batch remediation metrics: {e}")

    async def track_conversion(self, result: ConversionResult, direction: str) -> None:
        """Track a degraded conversion (fallback timezone or passthrough)."""
        try:
            if result.fallback_used:
                await self._record_metric(
                    name="dst.conversion.fallback.total",
                    value=1.0,
                    metric_type=MetricType.COUNTER,
                    labels={"direction": direction, "timezone": result.timezone_used or "none"},
                )

            if result.passthrough:
                await self._record_metric(
                    name="dst.conversion.passthrough.total",
                    value=1.0,
                    metric_type=MetricType.COUNTER,
                    labels={"direction": direction},
                )

        except Exception as e:
            logger.error(f"Failed to track DST conversion metrics: {e}")

    async def _record_metric(
        self,
        name: str,
        value: float,
        metric_type: MetricType = MetricType.GAUGE,
        labels: Optional[Dict[str, str]] = None,
    ) -> None:
        """Internal method to record metrics."""
        if self.storage:
            await record_metric(
                name=name,
                value=value,
                labels=labels,
                metric_type=metric_type,
                storage=self.storage,
            )
        else:
            logger.info(
                f"Metric: {name}={value} {metric_type.value} {labels or {}}"
            )


class InstrumentedBatchRemediator:
    """
    Wrapper around apply_batch that traces the run and tracks metrics.
    """

    def __init__(self, collector: Optional[DSTObservabilityCollector] = None):
        self.collector = collector

    async def apply_batch_with_metrics(
        self,
        events: Iterable,
        policy: Optional[RemediationPolicy] = None,
        default_timezone: Optional[str] = None,
    ) -> List[BatchRemediationItem]:
        events = list(events)

        with TrackedOperation("dst_batch_remediation", tracer) as operation:
            operation.add_attribute("batch_size", len(events))

            items = apply_batch(events, policy, default_timezone)
            duration_ms = operation.duration_ms

            changed = sum(1 for item in items if item.outcome.adjusted_date is not None)
            operation.add_attribute("changed", changed)

        if self.collector:
            await self.collector.track_batch_remediation(items, duration_ms)

        return items
