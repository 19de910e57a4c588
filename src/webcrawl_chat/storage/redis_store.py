import re
from typing import List, Optional

from webcrawl_chat.core.base import BaseStorage
from webcrawl_chat.core.redis import RedisPool

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisStorage(BaseStorage):
    """Storage backed by plain Redis string keys under a common prefix."""

    def __init__(self, redis_pool: RedisPool, key_prefix: str = "webcrawl_chat:", name: str = "redis"):
        super().__init__(name, {"key_prefix": key_prefix})
        self._redis_pool = redis_pool
        self.key_prefix = key_prefix

    @property
    def redis(self):
        return self._redis_pool.pool

    async def _get(self, key: str) -> Optional[str]:
        value = await self.redis.get(f"{self.key_prefix}{key}")
        if isinstance(value, bytes):
            value = value.decode()
        return value

    async def _set(self, key: str, value: str) -> None:
        await self.redis.set(f"{self.key_prefix}{key}", value)

    async def _list_keys(self, prefix: str) -> List[str]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", f"{self.key_prefix}{prefix}") + "*"
        keys = []
        async for key in self.redis.scan_iter(match=pattern):
            if isinstance(key, bytes):
                key = key.decode()
            keys.append(key[len(self.key_prefix):])
        return keys

    async def close(self) -> None:
        await self._redis_pool.close()
