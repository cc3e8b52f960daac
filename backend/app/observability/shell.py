"""
Observability Shell - I/O Operations Only
Metric storage in Redis and emission of observability events.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis.asyncio as redis
from opentelemetry import metrics, trace

from .contracts import Failure, Metric, MetricType, Result, Success
from .core import create_metric
from .events import MetricCollectionFailed, MetricRecorded

logger = logging.getLogger(__name__)

meter = metrics.get_meter("scheduling.observability")
tracer = trace.get_tracer("scheduling.observability")

metric_recording_duration = meter.create_histogram(
    "observability.recording.duration_ms",
    description="Time taken to record a metric",
    unit="milliseconds",
)

# Time series retention
TIMESERIES_TTL_SECONDS = 7 * 24 * 3600


class ObservabilityStorage:
    """
    Storage operations for observability data.
    Current values live in a Redis hash, history in a sorted set per metric.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        tenant: Optional[str] = None,
    ):
        self.redis = redis_client
        self.tenant = tenant or "default"

    async def record_metric(
        self,
        metric: Metric,
        emit_events: bool = True,
    ) -> Result[None, str]:
        """
        Record metric to Redis and emit events.

        Args:
            metric: Validated metric to record
            emit_events: Whether to emit MetricRecorded event

        Returns:
            Result indicating success or failure
        """
        start_time = datetime.now(timezone.utc)

        try:
            with tracer.start_as_current_span("record_metric") as span:
                span.set_attributes({
                    "metric.name": metric.name,
                    "metric.type": metric.metric_type.value,
                    "tenant": self.tenant,
                })

                redis_key = f"metrics:{self.tenant}:{metric.name}"
                metric_data = {
                    "value": metric.value,
                    "labels": json.dumps(metric.labels, sort_keys=True),
                    "timestamp": metric.timestamp.isoformat(),
                    "type": metric.metric_type.value,
                    "unit": metric.unit or "",
                }

                async with self.redis.pipeline() as pipe:
                    await pipe.hset(redis_key, mapping=metric_data)

                    ts_key = f"timeseries:{self.tenant}:{metric.name}"
                    await pipe.zadd(
                        ts_key,
                        {json.dumps(metric_data): metric.timestamp.timestamp()}
                    )
                    await pipe.expire(ts_key, TIMESERIES_TTL_SECONDS)

                    await pipe.execute()

                if emit_events:
                    await self._emit_event(
                        MetricRecorded(
                            metric=metric,
                            recorded_at=datetime.now(timezone.utc),
                            tenant=self.tenant,
                        )
                    )

                duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
                metric_recording_duration.record(
                    duration_ms,
                    {"metric_name": metric.name, "tenant": self.tenant}
                )

                return Success(None)

        except Exception as e:
            logger.error(f"Failed to record metric {metric.name}: {e}", exc_info=True)

            await self._emit_event(
                MetricCollectionFailed(
                    metric_name=metric.name,
                    error_message=str(e),
                    failed_at=datetime.now(timezone.utc),
                    retry_count=0,
                    tenant=self.tenant,
                )
            )

            return Failure(f"Failed to record metric: {e}")

    async def _emit_event(self, event: Any) -> None:
        """Emit observability event."""
        logger.debug(f"EVENT: {event}")


async def record_metric(
    name: str,
    value: float,
    labels: Optional[Dict[str, str]] = None,
    metric_type: MetricType = MetricType.GAUGE,
    storage: Optional[ObservabilityStorage] = None,
) -> Result[None, str]:
    """
    Convenience function to validate and record a metric.

    Args:
        name: Metric name
        value: Metric value
        labels: Optional labels
        metric_type: Type of metric
        storage: Storage instance to record into

    Returns:
        Result indicating success or failure
    """
    metric_result = create_metric(
        name=name,
        value=value,
        labels=labels or {},
        metric_type=metric_type,
    )

    if isinstance(metric_result, Failure):
        return Failure(f"Invalid metric: {metric_result.error}")

    if storage is None:
        logger.warning("No storage instance provided for metric recording")
        return Failure("No storage instance available")

    return await storage.record_metric(metric_result.value)
