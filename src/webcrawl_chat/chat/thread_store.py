import asyncio
import json
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from webcrawl_chat.core.interfaces import Storage
from webcrawl_chat.schemas.chat_schema import ChatMessage, ChatRole, utcnow
from webcrawl_chat.utils.error_handler import PersistenceError

logger = logging.getLogger(__name__)


class ChatThreadStore:
    """Append-only chat threads, one storage record per crawl session.

    A thread is stored as a JSON list of ``{role, content, timestamp}`` under
    ``chat_<session_id>`` and rewritten in full on every append. Storage is
    best effort: read failures and corrupt records load as an empty thread,
    write failures are logged and the updated thread is still returned.
    """

    KEY_PREFIX = "chat_"

    def __init__(self, storage: Storage):
        self.storage = storage
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @classmethod
    def key_for(cls, session_id: str) -> str:
        return f"{cls.KEY_PREFIX}{session_id}"

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        """Lock serializing read-modify-write cycles on one thread in this process."""
        return self._locks[session_id]

    async def session_ids(self) -> List[str]:
        """Ids of every session with a stored thread, sorted."""
        try:
            keys = await self.storage.list_keys(self.KEY_PREFIX)
        except PersistenceError as e:
            logger.error(f"Error listing chat threads: {e}")
            return []
        return [key[len(self.KEY_PREFIX):] for key in keys]

    async def load(self, session_id: str) -> List[ChatMessage]:
        try:
            return await self._read(session_id)
        except PersistenceError as e:
            logger.error(f"Error loading chat thread for session {session_id}: {e}")
            return []

    async def append(self, session_id: str, message: ChatMessage) -> List[ChatMessage]:
        async with self._lock_for(session_id):
            try:
                messages = await self._read(session_id)
            except PersistenceError as e:
                # Writing now would replace a thread we could not read
                logger.error(f"Error loading chat thread for session {session_id}, message not saved: {e}")
                return [message]

            messages.append(message)
            try:
                await self.storage.set(self.key_for(session_id), self._encode(messages))
            except PersistenceError as e:
                logger.error(f"Error saving chat thread for session {session_id}: {e}")
            return messages

    async def _read(self, session_id: str) -> List[ChatMessage]:
        raw = await self.storage.get(self.key_for(session_id))
        if raw is None:
            return []

        try:
            records = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Discarding unparseable chat thread for session {session_id}: {e}")
            return []

        if not isinstance(records, list):
            logger.warning(f"Discarding chat thread for session {session_id}: expected a list")
            return []

        messages = []
        for position, record in enumerate(records):
            message = self._decode(record)
            if message is None:
                logger.warning(f"Skipping malformed message {position} in chat thread for session {session_id}")
                continue
            messages.append(message)
        return messages

    @staticmethod
    def _encode(messages: List[ChatMessage]) -> str:
        return json.dumps([
            {
                "role": message.role.value,
                "content": message.content,
                "timestamp": message.timestamp.isoformat(),
            }
            for message in messages
        ])

    @staticmethod
    def _decode(record: Any) -> Optional[ChatMessage]:
        if not isinstance(record, dict):
            return None
        try:
            role = ChatRole(record.get("role"))
        except ValueError:
            return None
        content = record.get("content")
        if not isinstance(content, str):
            return None
        return ChatMessage(role=role, content=content, timestamp=_parse_timestamp(record.get("timestamp")))


def _parse_timestamp(value: Any) -> datetime:
    # A bad timestamp must not cost the message, so it falls back to now
    if isinstance(value, str):
        try:
            # JavaScript's toISOString() ends in "Z"
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return utcnow()
