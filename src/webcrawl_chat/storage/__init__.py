from .memory import InMemoryStorage
from .file_store import FileStorage
from .redis_store import RedisStorage
from .factory import create_storage

__all__ = ["InMemoryStorage", "FileStorage", "RedisStorage", "create_storage"]
