"""Storage interface shared by all backends."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from models.task import Task

DEFAULT_PREFIX = "cron:"


@runtime_checkable
class CronStorage(Protocol):
    """CRUD contract every task storage backend satisfies."""

    async def init(self) -> None:
        """Prepare the backend (open connections, create tables)."""
        ...

    async def add(self, task: Task) -> Task:
        """Persist a new task, assigning id and timestamps."""
        ...

    async def get(self, task_id: str) -> Optional[Task]:
        """Return the stored task or None."""
        ...

    async def get_all(self) -> List[Task]:
        """Return every task in this backend's namespace."""
        ...

    async def update(self, task_id: str, updates: Dict[str, Any]) -> Task:
        """Deep-merge ``updates`` into the stored task."""
        ...

    async def remove(self, task_id: str) -> bool:
        """Delete a task; True if it existed."""
        ...

    async def clear(self) -> None:
        """Delete every task in this backend's namespace."""
        ...
