import logging

from webcrawl_chat.config.schemas import (
    FileStorageConfig,
    MemoryStorageConfig,
    RedisStorageConfig,
    StorageConfig,
)
from webcrawl_chat.core.base import BaseStorage
from webcrawl_chat.core.redis import RedisPool
from webcrawl_chat.utils.error_handler import ConfigurationError

from .file_store import FileStorage
from .memory import InMemoryStorage
from .redis_store import RedisStorage

logger = logging.getLogger(__name__)


async def create_storage(config: StorageConfig) -> BaseStorage:
    """Build (and for Redis, connect) the storage described by the config."""
    if isinstance(config, MemoryStorageConfig):
        storage: BaseStorage = InMemoryStorage()
    elif isinstance(config, FileStorageConfig):
        storage = FileStorage(config.directory)
    elif isinstance(config, RedisStorageConfig):
        pool = RedisPool(config)
        await pool.connect()
        storage = RedisStorage(pool, key_prefix=config.key_prefix)
    else:
        raise ConfigurationError(f"Unsupported storage type: {config.type}")

    logger.info(f"Using {storage.name} storage for chat threads")
    return storage
