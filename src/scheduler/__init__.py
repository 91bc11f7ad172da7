"""Cron parsing, timezone and task validation core."""

from .cron_parser import (
    CRON_PRESETS,
    CRON_RANGES,
    CronParseError,
    ParsedCron,
    get_cron_description,
    parse_cron_expression,
    parse_field,
    validate_cron,
)
from .next_run import get_next_run, get_next_runs, resolve_timezone
from .timezone import TimezoneError, is_valid_timezone
from .validator import ValidationResult, validate_task, validate_task_options

__all__ = [
    "CRON_PRESETS",
    "CRON_RANGES",
    "CronParseError",
    "ParsedCron",
    "TimezoneError",
    "ValidationResult",
    "get_cron_description",
    "get_next_run",
    "get_next_runs",
    "is_valid_timezone",
    "parse_cron_expression",
    "parse_field",
    "resolve_timezone",
    "validate_cron",
    "validate_task",
    "validate_task_options"
]
