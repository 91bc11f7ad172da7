#!/usr/bin/env python3
"""Command-line entry point for CronKeeper."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from config import ModuleConfiguration, ModuleOptions, settings
from models import TaskOptions
from scheduler import (
    CronParseError,
    TimezoneError,
    get_cron_description,
    get_next_runs,
    parse_cron_expression,
    resolve_timezone,
    validate_task_options,
)
from scheduler.cron_parser import FIELD_ORDER
from scheduler.timezone import convert_timezone

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None):
    """Configure root logging from settings."""
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def load_module_options() -> ModuleOptions:
    """Module options built from the environment settings."""
    return ModuleConfiguration(settings.to_module_options()).get_options()


def cmd_parse(args) -> int:
    parsed = parse_cron_expression(args.expression)
    for field in FIELD_ORDER:
        values = getattr(parsed, field)
        print(f"{field:>12}: {', '.join(str(v) for v in values)}")
    return 0


def cmd_validate(args) -> int:
    result = validate_task_options(TaskOptions(expression=args.expression, timezone=args.timezone))
    errors = list(result.errors)

    module_options = load_module_options()
    if args.timezone and resolve_timezone(args.timezone, module_options) != args.timezone:
        errors.append(f"Timezone {args.timezone} conflicts with strict module timezone {module_options.timezone.type}")

    if not errors:
        print("Valid")
        return 0
    for error in errors:
        print(f"- {error}")
    return 1


def cmd_next(args) -> int:
    timezone_name = resolve_timezone(args.timezone, load_module_options())
    for run in get_next_runs(args.expression, timezone_name, count=args.count):
        local = convert_timezone(run, "UTC", timezone_name)
        print(f"{run.isoformat()}  ({local.isoformat()} {timezone_name})")
    return 0


def cmd_describe(args) -> int:
    print(get_cron_description(args.expression))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CronKeeper cron expression tools")
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: {settings.log_level})"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Show the occurrence sets of an expression")
    parse_cmd.add_argument("expression")
    parse_cmd.set_defaults(func=cmd_parse)

    validate_cmd = subparsers.add_parser("validate", help="Validate an expression and timezone")
    validate_cmd.add_argument("expression")
    validate_cmd.add_argument("--timezone", default=None)
    validate_cmd.set_defaults(func=cmd_validate)

    next_cmd = subparsers.add_parser("next", help="List upcoming run times")
    next_cmd.add_argument("expression")
    next_cmd.add_argument("--timezone", default=None, help=f"Timezone (default: {settings.timezone})")
    next_cmd.add_argument("--count", type=int, default=5)
    next_cmd.set_defaults(func=cmd_next)

    describe_cmd = subparsers.add_parser("describe", help="Describe an expression in words")
    describe_cmd.add_argument("expression")
    describe_cmd.set_defaults(func=cmd_describe)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        return args.func(args)
    except (CronParseError, TimezoneError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.error(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
