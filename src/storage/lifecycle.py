"""Record lifecycle helpers shared by the storage backends.

Backends compose these functions instead of inheriting them:

- ``create_task_record`` builds the record stored by ``add``
- ``update_task_record`` merges a partial update for ``update``
- ``make_key`` namespaces ids with the configured prefix
"""

import uuid
from collections.abc import Mapping
from dataclasses import fields, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from models.task import Task, TaskMetadata, TaskOptions, TaskStatus

DEFAULT_TIMEZONE = "UTC"

_TASK_FIELDS = {"id", "name", "status", "execute", "options", "metadata"}
_OPTION_FIELDS = {f.name for f in fields(TaskOptions)}
_METADATA_FIELDS = {f.name for f in fields(TaskMetadata)}
# Stamped by storage; values supplied in an update are ignored
_STAMPED_FIELDS = {"created_at", "updated_at"}


def generate_id() -> str:
    return str(uuid.uuid4())


def make_key(prefix: str, task_id: str) -> str:
    return f"{prefix}{task_id}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_date(value: Any) -> Optional[datetime]:
    """Return ``value`` as an aware datetime, or None if it is not a datetime.

    Naive values are read as UTC, the same way serialized records are restored.
    """
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _advance(previous: Optional[datetime]) -> datetime:
    now = utcnow()
    if previous is not None and now <= previous:
        # Clock did not move (or moved backwards); keep updated_at increasing
        now = previous + timedelta(microseconds=1)
    return now


def create_task_metadata(task: Task, now: datetime) -> TaskMetadata:
    source = task.metadata or TaskMetadata()
    run_count = source.run_count if source.run_count is not None else 0
    return TaskMetadata(
        run_count=run_count,
        last_run=validate_date(source.last_run),
        next_run=validate_date(source.next_run),
        last_error=source.last_error,
        created_at=now,
        updated_at=now,
    )


def create_task_record(task: Task, task_id: Optional[str] = None) -> Task:
    """Build a new stored record from a task definition.

    Assigns an id if none is given, stamps ``created_at``/``updated_at``
    and defaults the timezone to UTC. The input task is not modified.
    """
    now = utcnow()
    options = replace(task.options, timezone=task.options.timezone or DEFAULT_TIMEZONE)
    status = task.status or TaskStatus.PENDING
    return replace(
        task,
        id=task_id or task.id or generate_id(),
        status=status,
        options=options,
        metadata=create_task_metadata(task, now),
    )


def _check_keys(updates: Mapping, allowed: set, what: str) -> None:
    unknown = set(updates) - allowed
    if unknown:
        raise ValueError(f"Unknown {what} field(s): {', '.join(sorted(unknown))}")


def _merge_options(existing: TaskOptions, updates: Any) -> TaskOptions:
    if updates is None:
        return existing
    if not isinstance(updates, Mapping):
        raise TypeError("options update must be a mapping")
    _check_keys(updates, _OPTION_FIELDS, "option")
    merged = replace(existing, **updates)
    merged.timezone = updates.get("timezone") or existing.timezone or DEFAULT_TIMEZONE
    return merged


def _merge_metadata(existing: TaskMetadata, updates: Any) -> TaskMetadata:
    if updates is None:
        updates = {}
    if not isinstance(updates, Mapping):
        raise TypeError("metadata update must be a mapping")
    _check_keys(updates, _METADATA_FIELDS, "metadata")

    changes = {k: v for k, v in updates.items() if k not in _STAMPED_FIELDS}
    # An invalid timestamp never erases the stored one
    for name in ("last_run", "next_run"):
        if name in changes:
            changes[name] = validate_date(changes[name]) or getattr(existing, name)

    merged = replace(existing, **changes)
    merged.updated_at = _advance(existing.updated_at)
    return merged


def update_task_record(existing: Task, updates: Mapping) -> Task:
    """Deep-merge a partial update into a stored record.

    Args:
        existing: The stored task
        updates: Mapping of task fields; ``options`` and ``metadata`` may be
            nested mappings holding only the fields to change

    Returns:
        A new task; ``existing`` is not modified

    Raises:
        ValueError: If ``updates`` names unknown fields or an unknown status
    """
    if not isinstance(updates, Mapping):
        raise TypeError("updates must be a mapping")
    _check_keys(updates, _TASK_FIELDS, "task")

    top_level = {
        k: v for k, v in updates.items()
        if k not in ("id", "options", "metadata")
    }
    if "status" in top_level:
        top_level["status"] = TaskStatus(top_level["status"])

    return replace(
        existing,
        **top_level,
        id=existing.id,
        options=_merge_options(existing.options, updates.get("options")),
        metadata=_merge_metadata(existing.metadata or TaskMetadata(), updates.get("metadata")),
    )


def clone_task(task: Task) -> Task:
    """Copy a task so callers cannot mutate a stored record in place."""
    metadata = replace(task.metadata) if task.metadata is not None else None
    return replace(task, options=replace(task.options), metadata=metadata)
