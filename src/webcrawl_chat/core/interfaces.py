from abc import abstractmethod
from typing import List, Optional, Protocol


class Storage(Protocol):
    """Interface for key/value storage implementations."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Retrieve a value by key.

        Args:
            key: The key to retrieve

        Returns:
            The stored value, or None if not found
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value under the given key, replacing any previous value.

        Args:
            key: The key to store the value under
            value: The serialized value to store
        """
        pass

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> List[str]:
        """List all keys starting with the prefix.

        Args:
            prefix: The prefix to match keys against

        Returns:
            List of matching keys
        """
        pass
