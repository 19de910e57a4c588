"""Normalized views of the backend's JSON payloads.

The backend is an external service and its responses are not trusted to be
complete. Each ``from_payload`` constructor fills in defaults for missing or
mistyped fields instead of failing; only a payload that is not a JSON object
at all raises MalformedResponseError.
"""
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from webcrawl_chat.utils.error_handler import MalformedResponseError

logger = logging.getLogger(__name__)

NO_SUMMARY_PLACEHOLDER = "No summary available"
NO_RESPONSE_PLACEHOLDER = "No response received"


def _require_object(payload: Any, what: str) -> dict:
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Expected a JSON object for {what}, got {type(payload).__name__}",
            {"payload_type": type(payload).__name__}
        )
    return payload


def _as_id(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        return text or None
    return None


def _as_text(value: Any, default: str) -> str:
    # Empty strings fall back to the default as well
    if isinstance(value, str) and value:
        return value
    return default


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float) and value.is_integer():
        return max(0, int(value))
    return 0


class CrawlResult(BaseModel):
    """Response of the crawl interface with defaults applied."""
    keyword_id: Optional[str] = None
    summary: str = NO_SUMMARY_PLACEHOLDER
    urls: List[str] = Field(default_factory=list)
    urls_crawled: int = 0

    @classmethod
    def from_payload(cls, payload: Any) -> "CrawlResult":
        data = _require_object(payload, "crawl response")
        result = cls(
            keyword_id=_as_id(data.get("keyword_id", data.get("_id"))),
            summary=_as_text(data.get("summary"), NO_SUMMARY_PLACEHOLDER),
            urls=_as_str_list(data.get("urls")),
            urls_crawled=_as_count(data.get("urls_crawled")),
        )
        missing = [name for name in ("summary", "urls", "urls_crawled") if name not in data]
        if missing:
            logger.warning(f"Crawl response missing fields {missing}, using defaults")
        if result.keyword_id is None:
            logger.warning("Crawl response carries no keyword id; the session cannot be chatted with")
        return result


class DiscussionReply(BaseModel):
    message: str = NO_RESPONSE_PLACEHOLDER

    @classmethod
    def from_payload(cls, payload: Any) -> "DiscussionReply":
        data = _require_object(payload, "discussion response")
        return cls(message=_as_text(data.get("message"), NO_RESPONSE_PLACEHOLDER))


class HistoryEntry(BaseModel):
    """Lightweight listing projection of a crawl session."""
    id: str
    keyword: str = ""
    site_domain: Optional[str] = None
    url_count: int = 0

    @classmethod
    def from_listing(cls, payload: Any) -> Optional["HistoryEntry"]:
        """Build an entry from one ``keyword/all`` item, or None if it has no id."""
        try:
            data = _require_object(payload, "listing entry")
        except MalformedResponseError as e:
            logger.warning(f"Skipping listing entry: {e.message}")
            return None
        entry_id = _as_id(data.get("_id", data.get("id")))
        if entry_id is None:
            logger.warning("Skipping listing entry without an id")
            return None
        return cls(
            id=entry_id,
            keyword=_as_text(data.get("keyword"), ""),
            site_domain=_as_text(data.get("siteDomain"), "") or None,
            url_count=len(_as_str_list(data.get("urls"))),
        )


class KeywordDetail(BaseModel):
    """Full crawl record returned by the detail interface."""
    id: str
    keyword: str = ""
    site_domain: Optional[str] = None
    urls: List[str] = Field(default_factory=list)
    summary: str = NO_SUMMARY_PLACEHOLDER

    @classmethod
    def from_payload(cls, payload: Any, fallback_id: str) -> "KeywordDetail":
        data = _require_object(payload, "keyword detail")
        return cls(
            id=_as_id(data.get("_id")) or fallback_id,
            keyword=_as_text(data.get("keyword"), ""),
            site_domain=_as_text(data.get("siteDomain"), "") or None,
            urls=_as_str_list(data.get("urls")),
            summary=_as_text(data.get("summary"), NO_SUMMARY_PLACEHOLDER),
        )
