"""Relational task storage backed by SQLAlchemy."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from models.task import Task, task_from_dict, task_to_dict
from .base import DEFAULT_PREFIX
from .errors import StorageError, StorageUnavailableError, TaskNotFoundError
from .lifecycle import create_task_record, make_key, update_task_record

logger = logging.getLogger(__name__)


class DatabaseStorage:
    """Stores tasks as rows keyed by ``prefix + id``.

    Session work is blocking, so every operation runs in a worker thread.
    """

    def __init__(self, url: str, echo: bool = False, prefix: str = DEFAULT_PREFIX):
        self.url = url
        self.echo = echo
        self.prefix = prefix or DEFAULT_PREFIX
        self._manager = None
        self._lock = asyncio.Lock()

    @property
    def manager(self):
        if self._manager is None:
            raise StorageError("Database storage used before init()")
        return self._manager

    async def init(self) -> None:
        try:
            from sqlalchemy.exc import SQLAlchemyError

            from database import DatabaseManager
        except ImportError as e:
            raise StorageUnavailableError(
                "SQLAlchemy unavailable. Install with: pip install sqlalchemy", "database"
            ) from e

        manager = DatabaseManager(self.url, echo=self.echo)
        try:
            await asyncio.to_thread(manager.initialize)
        except (SQLAlchemyError, ImportError, OSError) as e:
            manager.close()
            raise StorageUnavailableError(f"Database unavailable: {e}", "database") from e

        self._manager = manager
        logger.info(f"Database storage initialized (prefix: {self.prefix!r})")

    async def close(self) -> None:
        if self._manager is not None:
            await asyncio.to_thread(self._manager.close)
            self._manager = None

    async def _run(self, func, *args):
        if self.manager.is_sqlite:
            # SQLite shares one pooled connection between threads
            async with self._lock:
                return await asyncio.to_thread(func, *args)
        return await asyncio.to_thread(func, *args)

    # ------------------------------------------------------------------
    # Blocking helpers, run through _run
    # ------------------------------------------------------------------

    def _record_model(self):
        from database import TaskRecord
        return TaskRecord

    def _write(self, task: Task) -> None:
        TaskRecord = self._record_model()
        data = task_to_dict(task)
        with self.manager.get_session() as session:
            session.merge(TaskRecord(
                key=make_key(self.prefix, task.id),
                task_id=task.id,
                name=data["name"],
                status=data["status"],
                options=data["options"],
                task_metadata=data["metadata"],
            ))

    def _read(self, task_id: str) -> Optional[Task]:
        TaskRecord = self._record_model()
        with self.manager.get_session() as session:
            row = session.get(TaskRecord, make_key(self.prefix, task_id))
            return task_from_dict(row.to_dict()) if row else None

    def _read_all(self) -> List[Task]:
        TaskRecord = self._record_model()
        with self.manager.get_session() as session:
            rows = (
                session.query(TaskRecord)
                .filter(TaskRecord.key.startswith(self.prefix, autoescape=True))
                .all()
            )
            return [task_from_dict(row.to_dict()) for row in rows]

    def _delete(self, task_id: str) -> bool:
        TaskRecord = self._record_model()
        with self.manager.get_session() as session:
            deleted = (
                session.query(TaskRecord)
                .filter(TaskRecord.key == make_key(self.prefix, task_id))
                .delete(synchronize_session=False)
            )
            return deleted > 0

    def _delete_all(self) -> int:
        TaskRecord = self._record_model()
        with self.manager.get_session() as session:
            return (
                session.query(TaskRecord)
                .filter(TaskRecord.key.startswith(self.prefix, autoescape=True))
                .delete(synchronize_session=False)
            )

    # ------------------------------------------------------------------
    # CRUD contract
    # ------------------------------------------------------------------

    async def add(self, task: Task) -> Task:
        record = create_task_record(task)
        await self._run(self._write, record)
        logger.debug(f"Added task '{record.name}' (ID: {record.id})")
        return record

    async def get(self, task_id: str) -> Optional[Task]:
        return await self._run(self._read, task_id)

    async def get_all(self) -> List[Task]:
        return await self._run(self._read_all)

    async def update(self, task_id: str, updates: Dict[str, Any]) -> Task:
        existing = await self.get(task_id)
        if existing is None:
            raise TaskNotFoundError(task_id)

        record = update_task_record(existing, updates)
        await self._run(self._write, record)
        logger.debug(f"Updated task '{record.name}' (ID: {task_id})")
        return record

    async def remove(self, task_id: str) -> bool:
        return await self._run(self._delete, task_id)

    async def clear(self) -> None:
        count = await self._run(self._delete_all)
        logger.info(f"Cleared {count} tasks from database storage")


async def create_database_storage(url: str, echo: bool = False, prefix: str = DEFAULT_PREFIX) -> DatabaseStorage:
    storage = DatabaseStorage(url, echo=echo, prefix=prefix)
    await storage.init()
    return storage
