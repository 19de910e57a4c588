import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import ClientTimeout

from webcrawl_chat.config.schemas import BackendConfig
from webcrawl_chat.schemas.backend_schema import CrawlResult, DiscussionReply, KeywordDetail
from webcrawl_chat.utils.error_handler import MalformedResponseError, NetworkError

logger = logging.getLogger(__name__)


class BackendClient:
    """Async client for the crawl/summarization and discussion backend."""

    def __init__(self, config: Optional[BackendConfig] = None, session: Optional[aiohttp.ClientSession] = None):
        self.config = config or BackendConfig()
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Content-Type": "application/json"},
                timeout=ClientTimeout(total=self.config.timeout)
            )
            self._owns_session = True
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> Any:
        """Make a JSON request to the backend.

        Raises:
            NetworkError: On transport failure, timeout, non-2xx status or a
                body that is not UTF-8 JSON
        """
        url = f"{self.config.base_url}{path.lstrip('/')}"
        logger.debug(f"{method} {url} params={params}")
        try:
            async with self._get_session().request(
                method,
                url,
                params=params,
                json=body,
                timeout=ClientTimeout(total=self.config.timeout),
            ) as response:
                if response.status < 200 or response.status >= 300:
                    logger.error(f"Backend returned {response.status} for {method} {path}")
                    raise NetworkError(
                        f"Backend API error: {response.status} {response.reason or ''}".strip(),
                        status_code=response.status,
                        details={"path": path}
                    )
                return await response.json(content_type=None)

        except NetworkError:
            raise
        except asyncio.TimeoutError:
            logger.error(f"Request to {path} timed out after {self.config.timeout}s")
            raise NetworkError(f"Request to {path} timed out", details={"path": path})
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Backend returned an undecodable body for {path}: {e}")
            raise NetworkError(f"Invalid JSON from {path}", details={"path": path})
        except aiohttp.ClientError as e:
            logger.error(f"Could not reach backend at {url}: {e}")
            raise NetworkError(f"Could not connect to backend: {e}", details={"path": path})

    async def crawl_domain(self, keyword: str, domain: str) -> CrawlResult:
        payload = await self._request(
            "GET", self.config.crawl_path, params={"keyword": keyword, "domain": domain}
        )
        return self._crawl_result(payload)

    async def crawl_urls(self, keyword: str, urls: List[str]) -> CrawlResult:
        payload = await self._request(
            "POST", self.config.crawl_path, params={"keyword": keyword}, body=list(urls)
        )
        return self._crawl_result(payload)

    async def discuss(self, keyword_id: str, user_prompt: str) -> DiscussionReply:
        payload = await self._request(
            "GET",
            self.config.discussion_path,
            params={"keywordId": keyword_id, "user_prompt": user_prompt},
        )
        try:
            return DiscussionReply.from_payload(payload)
        except MalformedResponseError as e:
            logger.warning(f"Using default discussion reply: {e.message}")
            return DiscussionReply()

    async def list_keywords(self) -> List[Any]:
        payload = await self._request("GET", self.config.keywords_path)
        if not isinstance(payload, list):
            logger.warning(f"Keyword listing is a {type(payload).__name__}, not a list; treating as empty")
            return []
        return payload

    async def get_keyword(self, keyword_id: str) -> KeywordDetail:
        payload = await self._request(
            "GET", self.config.keyword_detail_path, params={"keyword": keyword_id}
        )
        try:
            return KeywordDetail.from_payload(payload, fallback_id=keyword_id)
        except MalformedResponseError as e:
            logger.warning(f"Using empty detail for keyword {keyword_id}: {e.message}")
            return KeywordDetail(id=keyword_id)

    @staticmethod
    def _crawl_result(payload: Any) -> CrawlResult:
        try:
            return CrawlResult.from_payload(payload)
        except MalformedResponseError as e:
            logger.warning(f"Using default crawl result: {e.message}")
            return CrawlResult()
