from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from webcrawl_chat.utils.error_handler import PersistenceError

logger = logging.getLogger(__name__)


class BaseStorage(ABC):
    """Base implementation of the Storage interface.

    Subclasses implement the ``_get``/``_set``/``_list_keys`` primitives; the
    public methods wrap any backend failure in a PersistenceError so callers
    only ever deal with one error type.
    """

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        """Initialize the storage.

        Args:
            name: The name of the storage
            config: Configuration for the storage
        """
        self.name = name
        self.config = config or {}
        self.logger = logging.getLogger(f"{__name__}.{name}")

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._get(key)
        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to read key '{key}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to read key '{key}': {e}", {"key": key, "storage": self.name})

    async def set(self, key: str, value: str) -> None:
        try:
            await self._set(key, value)
        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to write key '{key}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to write key '{key}': {e}", {"key": key, "storage": self.name})

    async def list_keys(self, prefix: str = "") -> List[str]:
        try:
            return sorted(await self._list_keys(prefix))
        except PersistenceError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to list keys with prefix '{prefix}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to list keys: {e}", {"prefix": prefix, "storage": self.name})

    async def close(self) -> None:
        """Release any resources held by the storage."""
        return None

    @abstractmethod
    async def _get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def _set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def _list_keys(self, prefix: str) -> List[str]:
        pass
