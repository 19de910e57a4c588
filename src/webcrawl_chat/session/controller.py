import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set

from webcrawl_chat.backend.client import BackendClient
from webcrawl_chat.chat.thread_store import ChatThreadStore
from webcrawl_chat.history.index import HistoryIndex
from webcrawl_chat.schemas.backend_schema import HistoryEntry
from webcrawl_chat.schemas.chat_schema import ChatMessage
from webcrawl_chat.schemas.session_schema import CrawlSession, CrawlStatus, OpenedSession
from webcrawl_chat.streaming.renderer import StreamRenderer
from webcrawl_chat.utils.error_handler import NetworkError, ValidationError
from webcrawl_chat.session.validation import validate_keyword, validate_prompt, validate_target

logger = logging.getLogger(__name__)

CRAWL_ERROR_TEXT = "Error: Failed to fetch crawl data. Please try again."
CHAT_FALLBACK_TEXT = "Sorry, I encountered an error. Please try again."


class SessionController:
    """Drives crawl sessions from submission to displayed summary, and chat turns.

    Crawls share one display slot. Every crawl issued takes the next generation
    number; a response that resolves after a newer crawl was issued is stale
    and never reaches the display.
    """

    def __init__(
        self,
        client: BackendClient,
        thread_store: ChatThreadStore,
        history: Optional[HistoryIndex] = None,
        renderer: Optional[StreamRenderer] = None,
    ):
        self.client = client
        self.thread_store = thread_store
        self.history = history or HistoryIndex(client)
        self.renderer = renderer or StreamRenderer()

        self._generation = 0
        self._current: Optional[CrawlSession] = None
        # Every crawl session started, in the order they were issued
        self.sessions: List[CrawlSession] = []
        self._crawls_in_flight = 0
        self._turn_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._sending: Set[str] = set()

    async def start(self) -> List[HistoryEntry]:
        """Load the crawl history once at start-up."""
        return await self.history.refresh()

    async def close(self) -> None:
        self.renderer.cancel()

    @property
    def current_session(self) -> Optional[CrawlSession]:
        return self._current

    @property
    def display_text(self) -> str:
        return self.renderer.buffer

    @property
    def crawl_in_flight(self) -> bool:
        return self._crawls_in_flight > 0

    def is_sending(self, session_id: str) -> bool:
        return session_id in self._sending

    async def refresh_history(self) -> List[HistoryEntry]:
        return await self.history.refresh()

    async def wait_for_render(self) -> bool:
        return await self.renderer.wait()

    async def start_crawl(
        self,
        keyword: Optional[str],
        domain: Optional[str] = None,
        urls: Optional[Sequence[str]] = None,
    ) -> CrawlSession:
        """Validate the input, run the backend crawl and start revealing the summary.

        Returns once the backend has answered and the reveal has started; use
        ``wait_for_render()`` to wait for the summary to be fully displayed.

        Raises:
            ValidationError: Bad input; no network call was made
            NetworkError: The backend call failed; the session is Failed
        """
        session = CrawlSession(keyword=keyword or "", site_domain=domain, candidate_urls=list(urls or []))
        self.sessions.append(session)
        session.transition(CrawlStatus.VALIDATING)
        try:
            keyword = validate_keyword(keyword)
            domain, crawl_urls = validate_target(domain, urls)
        except ValidationError as e:
            session.transition(CrawlStatus.FAILED, e.message)
            logger.warning(f"Crawl rejected: {e.message}")
            raise

        session.keyword = keyword
        session.site_domain = domain
        session.candidate_urls = crawl_urls

        self._generation += 1
        session.generation = self._generation
        session.transition(CrawlStatus.REQUESTING, f"Crawling {session.target} for '{keyword}'")
        logger.info(f"Crawl {session.generation} started: keyword='{keyword}' target={session.target}")

        self._crawls_in_flight += 1
        try:
            if crawl_urls:
                result = await self.client.crawl_urls(keyword, crawl_urls)
            else:
                result = await self.client.crawl_domain(keyword, domain)
        except NetworkError as e:
            session.clear_result()
            session.transition(CrawlStatus.FAILED, e.message)
            logger.error(f"Crawl {session.generation} failed: {e}")
            if self._is_latest(session):
                self._current = None
                self.renderer.show(CRAWL_ERROR_TEXT)
            raise
        finally:
            self._crawls_in_flight -= 1

        session.apply_result(result)
        session.transition(CrawlStatus.SUCCEEDED, f"{session.urls_crawled} URLs crawled")
        logger.info(f"Crawl {session.generation} succeeded: id={session.id}, {session.urls_crawled} URLs crawled")

        if self._is_latest(session):
            self._current = session
            self._reveal(session)
        else:
            logger.info(
                f"Discarding stale crawl {session.generation} response; "
                f"crawl {self._generation} was issued after it"
            )

        await self.history.refresh()
        return session

    def _is_latest(self, session: CrawlSession) -> bool:
        return session.generation == self._generation

    def _reveal(self, session: CrawlSession) -> None:
        session.transition(CrawlStatus.STREAMING)

        def on_complete(_text: str) -> None:
            session.transition(CrawlStatus.COMPLETED, "Summary fully displayed")
            logger.debug(f"Crawl {session.generation} summary fully displayed")

        self.renderer.start(session.summary, on_complete=on_complete)

    async def send_message(self, session_id: str, prompt: str) -> List[ChatMessage]:
        """Run one chat turn and return the thread after it.

        The user message is stored before the backend is called. The turn
        always ends with exactly one assistant message: the backend's reply,
        or a fixed apology when the discussion call fails.

        Raises:
            ValidationError: Missing session id or empty prompt
        """
        validate_prompt(session_id, prompt)

        async with self._turn_locks[session_id]:
            self._sending.add(session_id)
            try:
                await self.thread_store.append(session_id, ChatMessage.user(prompt))
                try:
                    reply = await self.client.discuss(session_id, prompt)
                    answer = ChatMessage.assistant(reply.message)
                except Exception as e:
                    logger.error(f"Chat error for session {session_id}: {e}", exc_info=True)
                    answer = ChatMessage.assistant(CHAT_FALLBACK_TEXT)
                return await self.thread_store.append(session_id, answer)
            finally:
                self._sending.discard(session_id)

    async def open_session(self, session_id: str) -> OpenedSession:
        """Load a previous crawl record and its chat thread.

        The crawl record is best effort and is None when the backend cannot
        provide it.
        """
        if session_id is None or not str(session_id).strip():
            raise ValidationError("A session id is required", {"field": "session_id"})

        try:
            detail = await self.client.get_keyword(session_id)
        except NetworkError as e:
            logger.error(f"Failed to load crawl data for session {session_id}: {e}")
            detail = None

        messages = await self.thread_store.load(session_id)
        return OpenedSession(session_id=session_id, detail=detail, messages=messages)
