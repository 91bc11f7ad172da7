"""Validation of task definitions and task options."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List

from models.task import TaskStatus
from .cron_parser import CronParseError, parse_cron_expression
from .timezone import is_valid_timezone

NAME_MAX_LENGTH = 100
MAX_RETRIES = 10
MIN_RETRY_DELAY = 100  # 100ms
MAX_RETRY_DELAY = 60 * 60 * 1000  # 1 hour
MIN_TIMEOUT = 1000  # 1 second
MAX_TIMEOUT = 24 * 60 * 60 * 1000  # 24 hours

VALID_STATUSES = [status.value for status in TaskStatus]

_NAME_RE = re.compile(r"[A-Za-z0-9 \-]+")


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def _get(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_task(task: Any) -> ValidationResult:
    """Validate a full task definition.

    Every violation is collected; business-rule problems never raise.

    Args:
        task: Task instance or mapping with the same fields

    Returns:
        ValidationResult listing every problem found

    Raises:
        TypeError: If ``task`` is None
    """
    if task is None:
        raise TypeError("validate_task() requires a task, got None")

    errors: List[str] = []

    if not _get(task, "id"):
        errors.append("Task ID is required")

    name = _get(task, "name")
    if not name:
        errors.append("Task name is required")
    elif not isinstance(name, str):
        errors.append("Task name must be a string")
    else:
        if len(name) > NAME_MAX_LENGTH:
            errors.append(f"Task name must not exceed {NAME_MAX_LENGTH} characters")
        if not _NAME_RE.fullmatch(name):
            errors.append("Task name must only contain letters, numbers, spaces, and hyphens")

    if not callable(_get(task, "execute")):
        errors.append("Task must have a valid execute function")

    status = _get(task, "status")
    if status not in VALID_STATUSES:
        errors.append(f"Invalid Task status. Must be one of: {', '.join(VALID_STATUSES)}")

    options = _get(task, "options")
    if options is None:
        errors.append("Task options are required")
    else:
        errors.extend(validate_task_options(options).errors)

    metadata = _get(task, "metadata")
    if metadata is not None:
        if not _is_number(_get(metadata, "run_count")):
            errors.append("Metadata runCount must be a number")
        for attr, label in (
            ("created_at", "createdAt"),
            ("updated_at", "updatedAt"),
            ("next_run", "nextRun"),
            ("last_run", "lastRun"),
        ):
            value = _get(metadata, attr)
            if value is not None and not isinstance(value, datetime):
                errors.append(f"Metadata {label} must be a datetime object")
        last_error = _get(metadata, "last_error")
        if last_error is not None and not isinstance(last_error, BaseException):
            errors.append("Metadata lastError must be an exception object")

    return ValidationResult(valid=not errors, errors=errors)


def validate_task_options(options: Any) -> ValidationResult:
    """Validate the options of a task.

    All checks run independently; one failure never hides another.
    """
    if options is None:
        raise TypeError("validate_task_options() requires options, got None")

    errors: List[str] = []

    expression = _get(options, "expression")
    if not expression:
        errors.append("Cron expression is required")
    else:
        try:
            parse_cron_expression(expression)
        except CronParseError as e:
            errors.append(f"Invalid cron expression: {e}")

    timezone = _get(options, "timezone")
    if timezone and not is_valid_timezone(timezone):
        errors.append(f"Invalid timezone: {timezone}")

    max_retries = _get(options, "max_retries")
    if max_retries is not None:
        if not _is_int(max_retries) or max_retries < 0:
            errors.append("maxRetries must be a non-negative integer")
        if _is_number(max_retries) and max_retries > MAX_RETRIES:
            errors.append(f"maxRetries cannot exceed {MAX_RETRIES}")

    retry_delay = _get(options, "retry_delay")
    if retry_delay is not None:
        if not _is_int(retry_delay) or retry_delay < MIN_RETRY_DELAY:
            errors.append(f"retryDelay must be an integer >= {MIN_RETRY_DELAY}ms")
        if _is_number(retry_delay) and retry_delay > MAX_RETRY_DELAY:
            errors.append(f"retryDelay cannot exceed {MAX_RETRY_DELAY}ms")

    timeout = _get(options, "timeout")
    if timeout is not None:
        if not _is_int(timeout) or timeout < MIN_TIMEOUT:
            errors.append(f"timeout must be an integer >= {MIN_TIMEOUT}ms")
        if _is_number(timeout) and timeout > MAX_TIMEOUT:
            errors.append(f"timeout cannot exceed {MAX_TIMEOUT}ms")

    exclusive = _get(options, "exclusive")
    if exclusive is not None and not isinstance(exclusive, bool):
        errors.append("exclusive must be a boolean")

    catch_up = _get(options, "catch_up")
    if catch_up is not None and not isinstance(catch_up, bool):
        errors.append("catchUp must be a boolean")

    return ValidationResult(valid=not errors, errors=errors)
