"""Environment configuration for DST remediation."""

import logging
import os
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from .contracts import (
    ConfigValidationError,
    DSTSettings,
    RemediationPolicy,
    RescheduleDirection,
)
from .core import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

AUTO_RESCHEDULE_KEY = "DST_AUTO_RESCHEDULE"
AUTO_ADJUST_TIME_KEY = "DST_AUTO_ADJUST_TIME"
RESCHEDULE_DIRECTION_KEY = "DST_RESCHEDULE_DIRECTION"
MAX_RESCHEDULE_DAYS_KEY = "DST_MAX_RESCHEDULE_DAYS"
NOTIFY_USERS_KEY = "DST_NOTIFY_USERS"
DEFAULT_TIMEZONE_KEY = "DST_DEFAULT_TIMEZONE"
FALLBACK_TIMEZONE_KEY = "DST_FALLBACK_TIMEZONE"

MAX_RESCHEDULE_DAYS_LIMIT = 365

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def load_remediation_policy(environ: Optional[Mapping[str, str]] = None) -> RemediationPolicy:
    """
    Build a RemediationPolicy from environment variables.

    Unset variables keep the RemediationPolicy defaults.

    Raises:
        ConfigValidationError: a variable is set to an unparseable value
    """
    env = os.environ if environ is None else environ
    defaults = RemediationPolicy()

    direction = defaults.preferred_direction
    raw_direction = env.get(RESCHEDULE_DIRECTION_KEY)
    if raw_direction is not None:
        try:
            direction = RescheduleDirection(raw_direction.strip().lower())
        except ValueError as e:
            allowed = ", ".join(d.value for d in RescheduleDirection)
            raise ConfigValidationError(
                RESCHEDULE_DIRECTION_KEY, f"must be one of: {allowed}"
            ) from e

    return RemediationPolicy(
        auto_reschedule=_parse_bool(env, AUTO_RESCHEDULE_KEY, defaults.auto_reschedule),
        auto_adjust_time=_parse_bool(env, AUTO_ADJUST_TIME_KEY, defaults.auto_adjust_time),
        preferred_direction=direction,
        max_reschedule_days=_parse_days(env, defaults.max_reschedule_days),
        notify_users=_parse_bool(env, NOTIFY_USERS_KEY, defaults.notify_users),
    )


def load_dst_settings(environ: Optional[Mapping[str, str]] = None) -> DSTSettings:
    """Policy plus default and fallback timezones, validated against the tz database."""
    env = os.environ if environ is None else environ

    default_timezone = env.get(DEFAULT_TIMEZONE_KEY) or DEFAULT_TIMEZONE
    _check_timezone(DEFAULT_TIMEZONE_KEY, default_timezone)

    fallback_timezone = env.get(FALLBACK_TIMEZONE_KEY) or None
    if fallback_timezone is not None:
        _check_timezone(FALLBACK_TIMEZONE_KEY, fallback_timezone)

    settings = DSTSettings(
        default_timezone=default_timezone,
        fallback_timezone=fallback_timezone,
        policy=load_remediation_policy(env),
    )
    logger.info(
        f"DST settings loaded: timezone={default_timezone} "
        f"fallback={fallback_timezone} policy={settings.policy}"
    )
    return settings


def _parse_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = env.get(key)
    if value is None:
        return default

    normalised = value.strip().lower()
    if normalised in _TRUE_VALUES:
        return True
    if normalised in _FALSE_VALUES:
        return False
    raise ConfigValidationError(key, f"expected a boolean, got {value!r}")


def _parse_days(env: Mapping[str, str], default: int) -> int:
    value = env.get(MAX_RESCHEDULE_DAYS_KEY)
    if value is None:
        return default

    try:
        days = int(value)
    except ValueError as e:
        raise ConfigValidationError(
            MAX_RESCHEDULE_DAYS_KEY, f"expected an integer, got {value!r}"
        ) from e

    if not 0 <= days <= MAX_RESCHEDULE_DAYS_LIMIT:
        raise ConfigValidationError(
            MAX_RESCHEDULE_DAYS_KEY, f"must be between 0 and {MAX_RESCHEDULE_DAYS_LIMIT}"
        )
    return days


def _check_timezone(key: str, name: str) -> None:
    try:
        ZoneInfo(name)
    except Exception as e:
        raise ConfigValidationError(key, f"unknown timezone {name!r}") from e
