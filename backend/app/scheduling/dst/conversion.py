"""
Resilient conversions between local wall-clock time and absolute instants.

Near a transition a requested local time can be nonexistent (spring forward)
or ambiguous (fall back). None of the functions here raise: a failed
conversion is retried in the fallback timezone and, as a last resort, the
input is passed through as if it were already in the target representation.
Every step down that chain is logged and reported in ConversionResult.warnings.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from .contracts import ConversionResult, Failure, Result, Success

logger = logging.getLogger(__name__)


def convert_local_to_utc(
    local: datetime, tz: str, fallback_tz: Optional[str] = None
) -> ConversionResult:
    """
    Convert a naive local wall-clock time in `tz` to an aware UTC instant.

    Aware inputs are already instants and are only normalised to UTC.
    """
    return _convert(
        local,
        tz,
        fallback_tz,
        resolve=_resolve_local,
        passthrough=_tag_as_utc,
        description="local time",
    )


def convert_utc_to_local(
    instant: datetime, tz: str, fallback_tz: Optional[str] = None
) -> ConversionResult:
    """
    Convert an instant to an aware datetime in `tz`.

    Naive inputs are assumed to be UTC.
    """
    return _convert(
        instant,
        tz,
        fallback_tz,
        resolve=_resolve_instant,
        passthrough=lambda value: value,
        description="UTC time",
    )


def safe_local_to_utc(
    local: datetime, tz: str, fallback_tz: Optional[str] = None
) -> datetime:
    """Best-effort local → UTC conversion. Never raises."""
    return convert_local_to_utc(local, tz, fallback_tz).value


def safe_utc_to_local(
    instant: datetime, tz: str, fallback_tz: Optional[str] = None
) -> datetime:
    """Best-effort UTC → local conversion. Never raises."""
    return convert_utc_to_local(instant, tz, fallback_tz).value


def get_timezone_offset(instant: datetime, tz: str) -> int:
    """UTC offset of `tz` at `instant`, in minutes. 0 when it cannot be determined."""
    local = safe_utc_to_local(instant, tz)
    offset = local.utcoffset() if isinstance(local, datetime) else None
    if offset is None:
        return 0
    return int(offset.total_seconds() // 60)


def _convert(value, tz, fallback_tz, resolve, passthrough, description) -> ConversionResult:
    warnings = []

    primary = resolve(value, tz)
    if isinstance(primary, Success):
        return ConversionResult(value=primary.value, timezone_used=tz)

    message = f"Failed to convert {description} in {tz}: {primary.error}"
    logger.warning(message)
    warnings.append(message)

    if fallback_tz and fallback_tz != tz:
        fallback = resolve(value, fallback_tz)
        if isinstance(fallback, Success):
            message = f"Using fallback timezone {fallback_tz} for {description} conversion"
            logger.warning(message)
            warnings.append(message)
            return ConversionResult(
                value=fallback.value,
                timezone_used=fallback_tz,
                fallback_used=True,
                warnings=tuple(warnings),
            )

        message = f"Fallback timezone {fallback_tz} also failed: {fallback.error}"
        logger.warning(message)
        warnings.append(message)

    message = f"Using original {description} unchanged (last resort)"
    logger.warning(message)
    warnings.append(message)

    return ConversionResult(
        value=passthrough(value),
        timezone_used=None,
        passthrough=True,
        warnings=tuple(warnings),
    )


def _resolve_local(local: datetime, tz: str) -> Result[datetime, str]:
    try:
        if local.tzinfo is not None:
            return Success(local.astimezone(timezone.utc))

        zone = ZoneInfo(tz)
        earlier = local.replace(tzinfo=zone, fold=0)
        later = local.replace(tzinfo=zone, fold=1)

        if earlier.utcoffset() != later.utcoffset():
            round_trip = earlier.astimezone(timezone.utc).astimezone(zone)
            if round_trip.replace(tzinfo=None) != local:
                return Failure(f"{local.isoformat()} does not exist in {tz}")
            return Failure(f"{local.isoformat()} is ambiguous in {tz}")

        return Success(earlier.astimezone(timezone.utc))

    except Exception as e:
        return Failure(str(e) or type(e).__name__)


def _resolve_instant(instant: datetime, tz: str) -> Result[datetime, str]:
    try:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return Success(instant.astimezone(ZoneInfo(tz)))

    except Exception as e:
        return Failure(str(e) or type(e).__name__)


def _tag_as_utc(value):
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
