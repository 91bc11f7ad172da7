"""Redis-backed task storage.

Requires: pip install redis
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from models.task import Task, task_from_dict, task_to_dict
from .base import DEFAULT_PREFIX
from .errors import StorageError, StorageUnavailableError, TaskNotFoundError
from .lifecycle import create_task_record, make_key, update_task_record

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisStorage:
    """Stores each task as JSON text under ``prefix + id``.

    Example:
        >>> storage = RedisStorage(url="redis://localhost:6379/0")
        >>> await storage.init()
        >>> task = await storage.add(Task(name="cleanup", execute=run, options=TaskOptions("0 * * * *")))
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        password: Optional[str] = None,
        db: Optional[int] = None,
        prefix: str = DEFAULT_PREFIX,
        client: Any = None,
    ):
        """Initialize Redis storage.

        Args:
            url: Redis connection URL.
            password: Optional password, overrides the URL.
            db: Optional database number, overrides the URL.
            prefix: Prefix for all task keys.
            client: Pre-built asyncio Redis client; skips client creation.
        """
        self.url = url
        self.password = password
        self.db = db
        self.prefix = prefix or DEFAULT_PREFIX
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            raise StorageError("Redis storage used before init()")
        return self._client

    async def init(self) -> None:
        if self._client is None:
            try:
                from redis import asyncio as aioredis
            except ImportError as e:
                raise StorageUnavailableError(
                    "Redis client unavailable. Install with: pip install redis", "redis"
                ) from e

            kwargs: Dict[str, Any] = {"decode_responses": True}
            if self.password is not None:
                kwargs["password"] = self.password
            if self.db is not None:
                kwargs["db"] = self.db
            self._client = aioredis.from_url(self.url, **kwargs)

        try:
            await self._client.ping()
        except Exception as e:
            raise StorageUnavailableError(f"Redis unavailable at {self.url}: {e}", "redis") from e

        logger.info(f"Redis storage initialized (prefix: {self.prefix!r})")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    def _scan_pattern(self) -> str:
        return _GLOB_SPECIAL.sub(r"\\\1", self.prefix) + "*"

    async def _keys(self) -> List[str]:
        return [key async for key in self.client.scan_iter(match=self._scan_pattern())]

    def _decode(self, key: str, data: str) -> Task:
        try:
            return task_from_dict(json.loads(data))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            raise StorageError(f"Corrupt task record at key {key}: {e}") from e

    async def _save(self, task: Task) -> None:
        await self.client.set(make_key(self.prefix, task.id), json.dumps(task_to_dict(task)))

    async def add(self, task: Task) -> Task:
        record = create_task_record(task)
        await self._save(record)
        logger.debug(f"Added task '{record.name}' (ID: {record.id})")
        return record

    async def get(self, task_id: str) -> Optional[Task]:
        key = make_key(self.prefix, task_id)
        data = await self.client.get(key)
        if not data:
            return None
        return self._decode(key, data)

    async def get_all(self) -> List[Task]:
        keys = await self._keys()
        if not keys:
            return []

        tasks = []
        for key, data in zip(keys, await self.client.mget(keys)):
            if data is None:
                # Removed between scan and read
                continue
            try:
                tasks.append(self._decode(key, data))
            except StorageError as e:
                logger.warning(f"Skipping unreadable task record: {e}")
        return tasks

    async def update(self, task_id: str, updates: Dict[str, Any]) -> Task:
        existing = await self.get(task_id)
        if existing is None:
            raise TaskNotFoundError(task_id)

        record = update_task_record(existing, updates)
        await self._save(record)
        logger.debug(f"Updated task '{record.name}' (ID: {task_id})")
        return record

    async def remove(self, task_id: str) -> bool:
        deleted = await self.client.delete(make_key(self.prefix, task_id))
        return deleted > 0

    async def clear(self) -> None:
        keys = await self._keys()
        if keys:
            await self.client.delete(*keys)
        logger.info(f"Cleared {len(keys)} tasks from Redis storage")


async def create_redis_storage(
    url: str = "redis://localhost:6379/0",
    password: Optional[str] = None,
    db: Optional[int] = None,
    prefix: str = DEFAULT_PREFIX,
) -> RedisStorage:
    """Create and initialize a Redis storage.

    Raises:
        StorageUnavailableError: If redis is not installed or unreachable
    """
    storage = RedisStorage(url=url, password=password, db=db, prefix=prefix)
    await storage.init()
    return storage
