"""Next occurrence computation for parsed cron expressions."""

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from croniter import CroniterBadCronError, CroniterBadDateError, croniter

from .cron_parser import FIELD_ORDER, ParsedCron, parse_cron_expression
from .timezone import get_zone, is_strict_timezone_module_options

logger = logging.getLogger(__name__)

# Leap-day schedules can go 8 years without a match (2096 -> 2104)
MAX_YEARS_BETWEEN_MATCHES = 8


def resolve_timezone(task_timezone: Optional[str], module_options: Any = None) -> str:
    """Get the effective timezone for a task.

    A strict module configuration forces its own zone on every task;
    otherwise the task's zone wins, then the module zone, then UTC.
    """
    module_zone = None
    if module_options is not None:
        tz_options = getattr(module_options, "timezone", None)
        if tz_options is None and isinstance(module_options, dict):
            tz_options = module_options.get("timezone")
        if isinstance(tz_options, dict):
            module_zone = tz_options.get("type")
        elif tz_options is not None:
            module_zone = getattr(tz_options, "type", None)

    if module_zone and is_strict_timezone_module_options(module_options):
        return module_zone
    return task_timezone or module_zone or "UTC"


def to_croniter_expression(parsed: ParsedCron) -> str:
    """Render occurrence sets as explicit lists croniter understands.

    Passing the expanded sets keeps this parser's semantics (month steps,
    stepped ranges) instead of croniter's own reading of the original text.
    """
    return " ".join(
        ",".join(str(value) for value in getattr(parsed, field))
        for field in FIELD_ORDER
    )


def get_next_run(
    expression: Union[str, ParsedCron],
    timezone_name: str = "UTC",
    after: Optional[datetime] = None,
) -> datetime:
    """Get the first matching minute strictly after ``after``.

    All five fields must match the wall-clock time in ``timezone_name``.
    Wall times skipped by a DST change never match.

    Args:
        expression: Cron expression string or an already parsed expression
        timezone_name: IANA zone the expression is evaluated in
        after: Reference instant (default: now); naive values are read as UTC

    Returns:
        Next run time as an aware UTC datetime

    Raises:
        CronParseError: If the expression is invalid
        TimezoneError: If the zone is invalid
        ValueError: If the expression never matches a real date
    """
    parsed = expression if isinstance(expression, ParsedCron) else parse_cron_expression(expression)
    zone = get_zone(timezone_name)

    base = after or datetime.now(timezone.utc)
    if base.tzinfo is None:
        base = base.replace(tzinfo=timezone.utc)
    base = base.astimezone(timezone.utc)

    # Iterate over naive wall times in the zone; day_or=False ANDs day fields
    wall_base = base.astimezone(zone).replace(tzinfo=None, fold=0)
    try:
        cron = croniter(
            to_croniter_expression(parsed),
            wall_base,
            day_or=False,
            max_years_between_matches=MAX_YEARS_BETWEEN_MATCHES,
        )
        while True:
            wall = cron.get_next(datetime)
            run = wall.replace(tzinfo=zone).astimezone(timezone.utc)
            if run.astimezone(zone).replace(tzinfo=None) != wall:
                # Inside a DST gap
                continue
            if run > base:
                return run
    except (CroniterBadCronError, CroniterBadDateError) as e:
        raise ValueError(f"No occurrence found for cron expression: {e}") from e


def get_next_runs(
    expression: Union[str, ParsedCron],
    timezone_name: str = "UTC",
    after: Optional[datetime] = None,
    count: int = 5,
) -> List[datetime]:
    """Get the next ``count`` run times."""
    parsed = expression if isinstance(expression, ParsedCron) else parse_cron_expression(expression)
    runs = []
    current = after
    for _ in range(count):
        current = get_next_run(parsed, timezone_name, current)
        runs.append(current)
    logger.debug(f"Computed {len(runs)} run times in {timezone_name}")
    return runs
