from typing import Dict, List, Optional

from webcrawl_chat.core.base import BaseStorage


class InMemoryStorage(BaseStorage):
    """Process-local storage; contents are lost when the process exits."""

    def __init__(self, name: str = "memory"):
        super().__init__(name)
        self._data: Dict[str, str] = {}

    async def _get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def _set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def _list_keys(self, prefix: str) -> List[str]:
        return [key for key in self._data if key.startswith(prefix)]
