import json
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from webcrawl_chat.chat.thread_store import ChatThreadStore
from webcrawl_chat.schemas.chat_schema import ChatMessage, ChatRole
from webcrawl_chat.utils.error_handler import PersistenceError


@pytest.fixture
def failing_storage():
    """Storage whose every operation fails."""
    storage = AsyncMock()
    storage.get.side_effect = PersistenceError("disk unavailable")
    storage.set.side_effect = PersistenceError("disk unavailable")
    return storage


@pytest.mark.asyncio
class TestChatThreadStore:

    async def test_load_missing_thread_is_empty(self, thread_store):
        assert await thread_store.load("never-seen") == []

    async def test_append_then_load_round_trip(self, thread_store):
        m1 = ChatMessage.user("What is this site about?")
        m2 = ChatMessage.assistant("It is about **Python**.\n\n- docs\n- tutorials")

        await thread_store.append("kw-1", m1)
        returned = await thread_store.append("kw-1", m2)
        loaded = await thread_store.load("kw-1")

        assert [(m.role, m.content) for m in loaded] == [
            (ChatRole.USER, "What is this site about?"),
            (ChatRole.ASSISTANT, "It is about **Python**.\n\n- docs\n- tutorials"),
        ]
        assert loaded == returned
        assert loaded[0].timestamp == m1.timestamp

    async def test_identical_messages_are_not_merged(self, thread_store):
        for _ in range(3):
            await thread_store.append("kw-1", ChatMessage.user("again"))

        assert [m.content for m in await thread_store.load("kw-1")] == ["again"] * 3

    async def test_threads_are_isolated_per_session(self, thread_store):
        await thread_store.append("a", ChatMessage.user("for a"))
        await thread_store.append("ab", ChatMessage.user("for ab"))

        assert [m.content for m in await thread_store.load("a")] == ["for a"]
        assert [m.content for m in await thread_store.load("ab")] == ["for ab"]

    async def test_persisted_format(self, thread_store, memory_storage):
        await thread_store.append("kw-1", ChatMessage.user("hi"))

        raw = json.loads(await memory_storage.get("chat_kw-1"))
        assert len(raw) == 1
        assert raw[0]["role"] == "user"
        assert raw[0]["content"] == "hi"
        assert datetime.fromisoformat(raw[0]["timestamp"])

    @pytest.mark.parametrize("raw", ["{not json", '{"role": "user"}', "42", "null"])
    async def test_corrupt_thread_loads_empty(self, thread_store, memory_storage, raw):
        await memory_storage.set("chat_kw-1", raw)

        assert await thread_store.load("kw-1") == []

    async def test_corrupt_thread_is_replaced_on_append(self, thread_store, memory_storage):
        await memory_storage.set("chat_kw-1", "{not json")

        messages = await thread_store.append("kw-1", ChatMessage.user("fresh start"))

        assert [m.content for m in messages] == ["fresh start"]
        assert [m.content for m in await thread_store.load("kw-1")] == ["fresh start"]

    async def test_bad_timestamp_keeps_message(self, thread_store, memory_storage):
        before = datetime.now(timezone.utc)
        await memory_storage.set("chat_kw-1", json.dumps([
            {"role": "user", "content": "kept", "timestamp": "yesterday-ish"},
            {"role": "assistant", "content": "also kept"},
        ]))

        messages = await thread_store.load("kw-1")

        assert [m.content for m in messages] == ["kept", "also kept"]
        assert all(m.timestamp >= before for m in messages)

    async def test_javascript_timestamps_are_parsed(self, thread_store, memory_storage):
        await memory_storage.set("chat_kw-1", json.dumps([
            {"role": "user", "content": "hi", "timestamp": "2024-05-01T10:15:30.000Z"},
        ]))

        [message] = await thread_store.load("kw-1")

        assert message.timestamp == datetime(2024, 5, 1, 10, 15, 30, tzinfo=timezone.utc)

    async def test_records_without_role_or_content_are_skipped(self, thread_store, memory_storage):
        await memory_storage.set("chat_kw-1", json.dumps([
            {"role": "system", "content": "nope"},
            {"role": "user", "content": None},
            "just a string",
            {"role": "assistant", "content": "valid"},
        ]))

        assert [m.content for m in await thread_store.load("kw-1")] == ["valid"]

    async def test_load_degrades_on_storage_failure(self, failing_storage):
        store = ChatThreadStore(failing_storage)

        assert await store.load("kw-1") == []

    async def test_append_does_not_overwrite_unreadable_thread(self, failing_storage):
        store = ChatThreadStore(failing_storage)
        message = ChatMessage.user("hello")

        result = await store.append("kw-1", message)

        assert result == [message]
        failing_storage.set.assert_not_called()

    async def test_append_survives_write_failure(self, memory_storage):
        await memory_storage.set("chat_kw-1", json.dumps([{"role": "user", "content": "old"}]))
        memory_storage._set = AsyncMock(side_effect=OSError("read-only file system"))
        store = ChatThreadStore(memory_storage)

        result = await store.append("kw-1", ChatMessage.assistant("new"))

        assert [m.content for m in result] == ["old", "new"]
        assert [m.content for m in await store.load("kw-1")] == ["old"]

    async def test_session_ids_lists_stored_threads(self, thread_store, memory_storage):
        await thread_store.append("kw-2", ChatMessage.user("b"))
        await thread_store.append("kw-1", ChatMessage.user("a"))
        await memory_storage.set("unrelated", "x")

        assert await thread_store.session_ids() == ["kw-1", "kw-2"]

    async def test_session_ids_degrades_on_storage_failure(self):
        storage = AsyncMock()
        storage.list_keys.side_effect = PersistenceError("disk unavailable")

        assert await ChatThreadStore(storage).session_ids() == []
