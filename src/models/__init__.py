"""Data models for CronKeeper."""

from .task import (
    Task,
    TaskError,
    TaskMetadata,
    TaskOptions,
    TaskStatus,
    task_from_dict,
    task_to_dict,
)

__all__ = [
    "Task",
    "TaskError",
    "TaskMetadata",
    "TaskOptions",
    "TaskStatus",
    "task_from_dict",
    "task_to_dict"
]
