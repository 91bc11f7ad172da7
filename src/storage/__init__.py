"""Task storage backends."""

from .base import DEFAULT_PREFIX, CronStorage
from .errors import StorageError, StorageUnavailableError, TaskNotFoundError
from .factory import create_storage
from .memory import MemoryStorage, create_memory_storage

__all__ = [
    "DEFAULT_PREFIX",
    "CronStorage",
    "MemoryStorage",
    "StorageError",
    "StorageUnavailableError",
    "TaskNotFoundError",
    "create_memory_storage",
    "create_storage"
]
