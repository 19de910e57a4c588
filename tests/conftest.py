import asyncio
import pytest
from unittest.mock import AsyncMock

from webcrawl_chat.backend.client import BackendClient
from webcrawl_chat.chat.thread_store import ChatThreadStore
from webcrawl_chat.history.index import HistoryIndex
from webcrawl_chat.schemas.backend_schema import CrawlResult, DiscussionReply
from webcrawl_chat.session.controller import SessionController
from webcrawl_chat.storage.memory import InMemoryStorage
from webcrawl_chat.streaming.renderer import StreamRenderer


@pytest.fixture
def memory_storage():
    """Fresh in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def thread_store(memory_storage):
    return ChatThreadStore(memory_storage)


@pytest.fixture
def mock_client():
    """Backend client double with canned, well-formed answers."""
    client = AsyncMock(spec=BackendClient)
    client.crawl_domain.return_value = CrawlResult(
        keyword_id="kw-1", summary="Hello", urls=["a", "b"], urls_crawled=2
    )
    client.crawl_urls.return_value = CrawlResult(
        keyword_id="kw-2", summary="From URLs", urls=["https://example.com"], urls_crawled=1
    )
    client.discuss.return_value = DiscussionReply(message="Here is what I found.")
    client.list_keywords.return_value = [
        {"_id": "kw-1", "keyword": "python", "siteDomain": "org", "urls": ["a", "b"]}
    ]
    return client


@pytest.fixture
def renderer():
    # No delay between characters; each tick still yields to the event loop
    return StreamRenderer(tick_interval=0)


@pytest.fixture
def controller(mock_client, thread_store, renderer):
    return SessionController(
        mock_client,
        thread_store,
        history=HistoryIndex(mock_client),
        renderer=renderer,
    )


async def wait_until(predicate, timeout: float = 2.0):
    """Yield to the event loop until ``predicate()`` holds."""
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.001)
    await asyncio.wait_for(_poll(), timeout)
