"""Task model for scheduled cron tasks."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    PAUSED = "paused"


class TaskError(Exception):
    """Error restored from a persisted task record.

    Keeps the type name of the original exception so callers can still tell
    what failed after a restart.
    """

    def __init__(self, message: str, error_type: str = "Error"):
        super().__init__(message)
        self.error_type = error_type


@dataclass
class TaskOptions:
    expression: str
    timezone: Optional[str] = None
    max_retries: Optional[int] = None
    retry_delay: Optional[int] = None  # milliseconds
    timeout: Optional[int] = None  # milliseconds
    exclusive: Optional[bool] = None
    catch_up: Optional[bool] = None


@dataclass
class TaskMetadata:
    run_count: int = 0
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None
    last_error: Optional[BaseException] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Task:
    name: str
    execute: Optional[Callable[[], Any]]
    options: TaskOptions
    id: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    metadata: Optional[TaskMetadata] = field(default=None)


def _datetime_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if isinstance(value, datetime) else None


def _str_to_datetime(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _error_to_dict(error: Optional[BaseException]) -> Optional[Dict[str, str]]:
    if error is None:
        return None
    error_type = getattr(error, "error_type", None) or type(error).__name__
    return {"type": error_type, "message": str(error)}


def _dict_to_error(data: Any) -> Optional[TaskError]:
    if not isinstance(data, dict):
        return None
    return TaskError(data.get("message", ""), data.get("type") or "Error")


def task_to_dict(task: Task) -> Dict[str, Any]:
    """Serialize a task to a JSON-compatible dict.

    The ``execute`` callable is not serializable and is left out.
    """
    options = task.options
    metadata = task.metadata or TaskMetadata()
    status = task.status.value if isinstance(task.status, TaskStatus) else task.status
    return {
        "id": task.id,
        "name": task.name,
        "status": status,
        "options": {
            "expression": options.expression,
            "timezone": options.timezone,
            "max_retries": options.max_retries,
            "retry_delay": options.retry_delay,
            "timeout": options.timeout,
            "exclusive": options.exclusive,
            "catch_up": options.catch_up,
        },
        "metadata": {
            "run_count": metadata.run_count,
            "last_run": _datetime_to_str(metadata.last_run),
            "next_run": _datetime_to_str(metadata.next_run),
            "last_error": _error_to_dict(metadata.last_error),
            "created_at": _datetime_to_str(metadata.created_at),
            "updated_at": _datetime_to_str(metadata.updated_at),
        },
    }


def task_from_dict(data: Dict[str, Any]) -> Task:
    """Rebuild a task from its serialized form.

    Temporal fields are parsed back into timezone-aware datetimes. The
    restored task has no ``execute`` callable.

    Raises:
        ValueError: If the payload is missing required fields or holds
            malformed timestamps.
    """
    if not isinstance(data, dict):
        raise ValueError("Task payload must be an object")

    raw_options = data.get("options")
    if not isinstance(raw_options, dict) or "expression" not in raw_options:
        raise ValueError("Task payload has no cron expression")
    raw_metadata = data.get("metadata")
    if raw_metadata is None:
        raw_metadata = {}
    elif not isinstance(raw_metadata, dict):
        raise ValueError("Task metadata must be an object")

    status = data.get("status") or TaskStatus.PENDING.value
    try:
        status = TaskStatus(status)
    except ValueError:
        pass

    return Task(
        id=data.get("id"),
        name=data.get("name", ""),
        execute=None,
        status=status,
        options=TaskOptions(
            expression=raw_options["expression"],
            timezone=raw_options.get("timezone"),
            max_retries=raw_options.get("max_retries"),
            retry_delay=raw_options.get("retry_delay"),
            timeout=raw_options.get("timeout"),
            exclusive=raw_options.get("exclusive"),
            catch_up=raw_options.get("catch_up"),
        ),
        metadata=TaskMetadata(
            run_count=raw_metadata.get("run_count", 0),
            last_run=_str_to_datetime(raw_metadata.get("last_run")),
            next_run=_str_to_datetime(raw_metadata.get("next_run")),
            last_error=_dict_to_error(raw_metadata.get("last_error")),
            created_at=_str_to_datetime(raw_metadata.get("created_at")),
            updated_at=_str_to_datetime(raw_metadata.get("updated_at")),
        ),
    )
