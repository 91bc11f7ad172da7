"""Storage error types."""

from typing import Optional


class StorageError(Exception):
    """Base class for storage failures."""


class StorageUnavailableError(StorageError):
    """The backend cannot be reached or its client library is missing."""

    def __init__(self, message: str, backend: Optional[str] = None):
        super().__init__(message)
        self.backend = backend


class TaskNotFoundError(StorageError):
    def __init__(self, task_id: str):
        super().__init__(f"Task with id {task_id} not found")
        self.task_id = task_id
