"""Storage backend selection."""

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from config import StorageOptions
from .base import CronStorage
from .errors import StorageError

logger = logging.getLogger(__name__)


async def create_storage(
    options: Optional[Union[StorageOptions, Dict[str, Any]]] = None,
    **overrides: Any,
) -> CronStorage:
    """Create and initialize the backend named by ``options.type``.

    Args:
        options: Storage options (defaults to in-memory storage)
        **overrides: Extra constructor arguments for the backend, e.g. a
            pre-built ``client`` for Redis

    Raises:
        StorageError: If the storage type is not supported
        StorageUnavailableError: If the backend cannot be initialized
    """
    if options is None:
        options = StorageOptions()
    elif isinstance(options, dict):
        try:
            options = StorageOptions.model_validate(options)
        except ValidationError as e:
            raise StorageError(f"Invalid storage options: {e}") from e

    if options.type == "memory":
        from .memory import MemoryStorage
        storage = MemoryStorage(prefix=options.prefix, **overrides)
    elif options.type == "redis":
        from .redis import RedisStorage
        storage = RedisStorage(
            url=options.redis_url,
            password=options.redis_password,
            db=options.redis_db,
            prefix=options.prefix,
            **overrides,
        )
    elif options.type == "database":
        from .database import DatabaseStorage
        storage = DatabaseStorage(
            options.database_url,
            echo=options.database_echo,
            prefix=options.prefix,
            **overrides,
        )
    else:
        raise StorageError(f"Storage type {options.type} is not supported")

    await storage.init()
    logger.info(f"Using {options.type} storage")
    return storage
