"""Timezone conversion and validation helpers."""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DateInput = Union[datetime, str]

_INVALID_DATE_MESSAGE = "Invalid date format. Please provide a datetime object or ISO string."


class TimezoneError(ValueError):
    """Raised for unknown zones and failed conversions."""

    def __init__(self, message: str, timezone: Optional[str] = None):
        super().__init__(message)
        self.timezone = timezone


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA zone name.

    Raises:
        TimezoneError: If the zone is unknown or the name is malformed
    """
    if not isinstance(name, str) or not name:
        raise TimezoneError(f"Invalid timezone: {name!r}", name)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise TimezoneError(f"Invalid timezone: {name}", name) from e


def _coerce(date: Any) -> datetime:
    if isinstance(date, datetime):
        return date
    if isinstance(date, str):
        try:
            return datetime.fromisoformat(date.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise TimezoneError(f"Invalid ISO date string: '{date}'") from e
    raise TypeError(_INVALID_DATE_MESSAGE)


def _render(value: datetime, format: Optional[str]) -> Union[datetime, str]:
    return value.strftime(format) if format else value


def to_datetime(date: DateInput) -> datetime:
    """Return ``date`` as a datetime, parsing ISO-8601 text if needed."""
    return _coerce(date)


def convert_timezone(
    date: DateInput,
    from_timezone: str,
    to_timezone: str,
    format: Optional[str] = None,
) -> Union[datetime, str]:
    """Convert a date from one timezone to another.

    Naive datetimes are read as wall-clock time in ``from_timezone``; aware
    datetimes keep their instant.

    Args:
        date: datetime or ISO-8601 string
        from_timezone: Source zone (e.g. 'America/New_York')
        to_timezone: Target zone (e.g. 'Asia/Tokyo')
        format: Optional strftime pattern for the output

    Returns:
        Aware datetime in the target zone, or a formatted string

    Raises:
        TypeError: If ``date`` is neither a datetime nor a string
        TimezoneError: If either zone is invalid or the conversion fails
    """
    value = _coerce(date)
    source = get_zone(from_timezone)
    target = get_zone(to_timezone)

    if value.tzinfo is None:
        value = value.replace(tzinfo=source)
    try:
        converted = value.astimezone(target)
    except (OverflowError, ValueError) as e:
        raise TimezoneError("Invalid timezone conversion result", to_timezone) from e

    return _render(converted, format)


def from_local(
    local_date: DateInput,
    target_timezone: str,
    format: Optional[str] = None,
) -> Union[datetime, str]:
    """Convert local system time to a target timezone."""
    value = _coerce(local_date)
    target = get_zone(target_timezone)

    try:
        if value.tzinfo is None:
            value = value.astimezone()
        converted = value.astimezone(target)
    except (OverflowError, ValueError) as e:
        raise TimezoneError("Invalid timezone conversion result", target_timezone) from e

    return _render(converted, format)


def to_local(
    date: DateInput,
    source_timezone: str,
    format: Optional[str] = None,
) -> Union[datetime, str]:
    """Convert a timezone-specific time to local system time."""
    value = _coerce(date)
    source = get_zone(source_timezone)

    if value.tzinfo is None:
        value = value.replace(tzinfo=source)
    try:
        converted = value.astimezone()
    except (OverflowError, ValueError) as e:
        raise TimezoneError("Invalid timezone conversion result", source_timezone) from e

    return _render(converted, format)


def is_in_dst(timezone: str) -> bool:
    """Check if a given timezone currently observes daylight saving time."""
    now = datetime.now(get_zone(timezone))
    return bool(now.dst())


def get_timezone_offset(timezone: str, date: Optional[DateInput] = None) -> str:
    """Get the UTC offset of a timezone as '+HH:MM' or '-HH:MM'.

    Args:
        timezone: Zone to check
        date: Instant to check (defaults to now); naive values are read as UTC
    """
    if date is not None:
        value = convert_timezone(date, "UTC", timezone)
    else:
        value = datetime.now(get_zone(timezone))

    total_seconds = int(value.utcoffset().total_seconds())
    sign = "+" if total_seconds >= 0 else "-"
    # Historical LMT offsets carry seconds; truncate them toward zero
    hours, remainder = divmod(abs(total_seconds), 3600)
    return f"{sign}{hours:02d}:{remainder // 60:02d}"


def _timezone_name(spec: Any) -> Optional[str]:
    if isinstance(spec, str):
        return spec
    if isinstance(spec, Mapping):
        return spec.get("type")
    return getattr(spec, "type", None)


def is_valid_timezone(spec: Any) -> bool:
    """Validate a zone name or a ``{type, validate, strict}`` descriptor.

    Returns False for None, lists and other unsupported shapes.
    """
    if not spec or isinstance(spec, (list, tuple, set, bytes)):
        return False
    if not isinstance(spec, (str, Mapping)) and not hasattr(spec, "type"):
        return False

    name = _timezone_name(spec)
    if not isinstance(name, str) or not name:
        return False
    try:
        datetime.now(get_zone(name))
    except TimezoneError:
        logger.debug(f"Rejected timezone {name!r}")
        return False
    return True


def _strict_flag(options: Any) -> Optional[bool]:
    if options is None:
        return None
    if isinstance(options, Mapping):
        timezone = options.get("timezone")
    else:
        timezone = getattr(options, "timezone", None)
    if not timezone:
        return None
    if isinstance(timezone, Mapping):
        return timezone.get("strict")
    return getattr(timezone, "strict", None)


def is_strict_timezone_module_options(options: Any) -> bool:
    """True when the module configuration pins every task to its zone."""
    return _strict_flag(options) is True


def is_flexible_timezone_module_options(options: Any) -> bool:
    """True when tasks may declare their own zone."""
    return _strict_flag(options) is False
