"""In-memory task storage (process lifetime only)."""

import logging
from typing import Any, Dict, List, Optional

from models.task import Task
from .base import DEFAULT_PREFIX
from .errors import TaskNotFoundError
from .lifecycle import clone_task, create_task_record, make_key, update_task_record

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Dict-backed storage; everything is lost on restart."""

    def __init__(self, prefix: str = DEFAULT_PREFIX):
        self.prefix = prefix or DEFAULT_PREFIX
        self._tasks: Dict[str, Task] = {}

    async def init(self) -> None:
        logger.info("Memory storage initialized")

    async def add(self, task: Task) -> Task:
        record = create_task_record(task)
        self._tasks[make_key(self.prefix, record.id)] = record
        logger.debug(f"Added task '{record.name}' (ID: {record.id})")
        return clone_task(record)

    async def get(self, task_id: str) -> Optional[Task]:
        record = self._tasks.get(make_key(self.prefix, task_id))
        return clone_task(record) if record else None

    async def get_all(self) -> List[Task]:
        return [clone_task(record) for record in self._tasks.values()]

    async def update(self, task_id: str, updates: Dict[str, Any]) -> Task:
        key = make_key(self.prefix, task_id)
        existing = self._tasks.get(key)
        if existing is None:
            raise TaskNotFoundError(task_id)

        record = update_task_record(existing, updates)
        self._tasks[key] = record
        logger.debug(f"Updated task '{record.name}' (ID: {task_id})")
        return clone_task(record)

    async def remove(self, task_id: str) -> bool:
        removed = self._tasks.pop(make_key(self.prefix, task_id), None) is not None
        if removed:
            logger.debug(f"Removed task {task_id}")
        return removed

    async def clear(self) -> None:
        count = len(self._tasks)
        self._tasks.clear()
        logger.info(f"Cleared {count} tasks from memory storage")


def create_memory_storage(prefix: str = DEFAULT_PREFIX) -> MemoryStorage:
    return MemoryStorage(prefix=prefix)
