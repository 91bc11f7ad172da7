"""Cron expression parsing and validation."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class FieldRange(NamedTuple):
    min: int
    max: int


CRON_RANGES: Dict[str, FieldRange] = {
    "minute": FieldRange(0, 59),
    "hour": FieldRange(0, 23),
    "day_of_month": FieldRange(1, 31),
    "month": FieldRange(1, 12),
    "day_of_week": FieldRange(0, 6),  # 0 = Sunday
}

FIELD_ORDER = ("minute", "hour", "day_of_month", "month", "day_of_week")

CRON_PRESETS: Dict[str, str] = {
    "every_minute": "* * * * *",
    "every_five_minutes": "*/5 * * * *",
    "every_ten_minutes": "*/10 * * * *",
    "every_fifteen_minutes": "*/15 * * * *",
    "every_thirty_minutes": "*/30 * * * *",
    "hourly": "0 * * * *",
    "daily": "0 0 * * *",
    "weekly": "0 0 * * 0",
    "monthly": "0 0 1 * *",
    "yearly": "0 0 1 1 *",
}

_NUMBER_RE = re.compile(r"[0-9]+")
_RANGE_RE = re.compile(r"([0-9]+)\s*-\s*([0-9]+)")


class CronParseError(ValueError):
    """Raised when a cron expression or one of its fields is malformed."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value

    def __str__(self) -> str:
        if self.field is None:
            return self.message
        return f"{self.message} (field: {self.field}, value: '{self.value}')"


@dataclass(frozen=True)
class ParsedCron:
    """Occurrence sets of a 5-field cron expression."""
    minute: List[int]
    hour: List[int]
    day_of_month: List[int]
    month: List[int]
    day_of_week: List[int]


def validate_value(field: str, value: int) -> bool:
    """Check that ``value`` is an integer inside the bounds of ``field``."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    bounds = CRON_RANGES[field]
    return bounds.min <= value <= bounds.max


def _parse_number(field: str, text: str, context: str) -> int:
    if not _NUMBER_RE.fullmatch(text):
        raise CronParseError("Invalid number format", field, context)
    number = int(text)
    if not validate_value(field, number):
        raise CronParseError("Value out of range", field, context)
    return number


def _handle_asterisk(bounds: FieldRange) -> List[int]:
    return list(range(bounds.min, bounds.max + 1))


def _handle_list(field: str, value: str) -> List[int]:
    result = set()
    for part in value.split(","):
        if not part.strip():
            raise CronParseError("Empty list item", field, value)
        result.update(parse_field(field, part.strip()))
    return sorted(result)


def _handle_step(field: str, value: str) -> List[int]:
    parts = [part.strip() for part in value.split("/")]
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise CronParseError("Invalid step format", field, value)
    base, step_text = parts

    bounds = CRON_RANGES[field]
    step = _parse_number(field, step_text, value)
    if step <= 0 or step > bounds.max:
        raise CronParseError("Invalid step value", field, value)

    if base == "*":
        # */n on months starts from February
        start = 2 if field == "month" else bounds.min
        return list(range(start, bounds.max + 1, step))

    if "-" not in base:
        start = _parse_number(field, base, value)
        return list(range(start, bounds.max + 1, step))

    resolved = _handle_range(field, base)
    return [number for index, number in enumerate(resolved) if index % step == 0]


def _handle_range(field: str, value: str) -> List[int]:
    match = _RANGE_RE.fullmatch(value)
    if not match:
        raise CronParseError("Invalid range format", field, value)

    start = _parse_number(field, match.group(1), value)
    end = _parse_number(field, match.group(2), value)
    if start > end:
        raise CronParseError("Range start must be less than or equal to end", field, value)

    return list(range(start, end + 1))


def parse_field(field: str, value: str) -> List[int]:
    """Parse a single cron field into its sorted occurrence set.

    Args:
        field: Field name, one of ``CRON_RANGES``
        value: Field text (e.g. ``"*/15"``, ``"1-5,10"``)

    Returns:
        Ascending list of unique integers within the field bounds

    Raises:
        CronParseError: If the field text is malformed or out of range
    """
    if field not in CRON_RANGES:
        raise CronParseError(f"Unknown cron field '{field}'")

    text = value.strip()

    if text == "*":
        return _handle_asterisk(CRON_RANGES[field])
    if "," in text:
        return _handle_list(field, text)
    if "/" in text:
        return _handle_step(field, text)
    if "-" in text:
        return _handle_range(field, text)
    return [_parse_number(field, text, value)]


def parse_cron_expression(expression: str) -> ParsedCron:
    """Parse a 5-field cron expression.

    Args:
        expression: Cron expression string (e.g., "0 */2 * * *")

    Returns:
        ParsedCron with one occurrence set per field

    Raises:
        CronParseError: If the expression is malformed
    """
    if not isinstance(expression, str):
        raise CronParseError("Cron expression must be a string")

    fields = expression.split()
    if len(fields) != 5:
        raise CronParseError(f"Invalid number of fields: expected 5, got {len(fields)}")

    try:
        values = {name: parse_field(name, text) for name, text in zip(FIELD_ORDER, fields)}
    except CronParseError:
        raise
    except Exception as e:
        raise CronParseError("Failed to parse cron expression") from e

    return ParsedCron(**values)


def validate_cron(expression: str) -> bool:
    """Validate a cron expression.

    Args:
        expression: Cron expression string (e.g., "0 */2 * * *")

    Returns:
        True if valid, False otherwise
    """
    try:
        parse_cron_expression(expression)
        return True
    except CronParseError as e:
        logger.error(f"Invalid cron expression '{expression}': {e}")
        return False


_PRESET_DESCRIPTIONS = {
    "* * * * *": "Every minute",
    "*/5 * * * *": "Every 5 minutes",
    "*/10 * * * *": "Every 10 minutes",
    "*/15 * * * *": "Every 15 minutes",
    "*/30 * * * *": "Every 30 minutes",
    "0 * * * *": "Every hour",
    "0 0 * * *": "Daily at midnight",
    "0 0 * * 0": "Weekly on Sunday at midnight",
    "0 0 1 * *": "Monthly on the 1st at midnight",
    "0 0 1 1 *": "Yearly on January 1st at midnight",
}

_MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday",
              "Thursday", "Friday", "Saturday"]


def get_cron_description(expression: str) -> str:
    """Get human-readable description of cron expression.

    Args:
        expression: Cron expression string

    Returns:
        Human-readable description, or the expression itself if it is invalid
    """
    normalized = " ".join(expression.split()) if isinstance(expression, str) else ""
    if normalized in _PRESET_DESCRIPTIONS:
        return _PRESET_DESCRIPTIONS[normalized]

    try:
        parse_cron_expression(normalized)
    except CronParseError as e:
        logger.debug(f"Could not describe cron expression '{expression}': {e}")
        return expression

    minute, hour, day, month, weekday = normalized.split()
    desc_parts = []

    if minute != "*":
        if minute.startswith("*/"):
            desc_parts.append(f"every {minute[2:]} minutes")
        else:
            desc_parts.append(f"at minute {minute}")

    if hour != "*":
        if hour.startswith("*/"):
            desc_parts.append(f"every {hour[2:]} hours")
        else:
            desc_parts.append(f"at hour {hour}")

    if day != "*":
        desc_parts.append(f"on day {day}")

    if month != "*":
        if month.isdigit():
            desc_parts.append(f"in {_MONTH_NAMES[int(month) - 1]}")
        else:
            desc_parts.append(f"in month {month}")

    if weekday != "*":
        if weekday.isdigit():
            desc_parts.append(f"on {_DAY_NAMES[int(weekday)]}")
        else:
            desc_parts.append(f"on weekday {weekday}")

    if desc_parts:
        return "Runs " + ", ".join(desc_parts)
    return "Every minute"
