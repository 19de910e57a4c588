import logging
from typing import List, Optional

from webcrawl_chat.backend.client import BackendClient
from webcrawl_chat.schemas.backend_schema import HistoryEntry
from webcrawl_chat.utils.error_handler import NetworkError

logger = logging.getLogger(__name__)


class HistoryIndex:
    """Cached listing of the crawl sessions known to the backend.

    The cache is only ever replaced wholesale by ``refresh()``; entries are
    never edited or invalidated individually.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self._entries: List[HistoryEntry] = []
        self.refresh_count = 0

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    async def refresh(self) -> List[HistoryEntry]:
        """Fetch the full listing and replace the cache.

        A failed fetch is logged and leaves the previous cache in place.
        """
        try:
            listing = await self.client.list_keywords()
        except NetworkError as e:
            logger.warning(f"Could not refresh crawl history, keeping {len(self._entries)} cached entries: {e}")
            return self.entries

        entries = []
        for item in listing:
            entry = HistoryEntry.from_listing(item)
            if entry is not None:
                entries.append(entry)

        self._entries = entries
        self.refresh_count += 1
        logger.info(f"Crawl history refreshed: {len(entries)} sessions")
        return self.entries
