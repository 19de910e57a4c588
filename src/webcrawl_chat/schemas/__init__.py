from .chat_schema import ChatMessage, ChatRole
from .backend_schema import (
    CrawlResult,
    DiscussionReply,
    HistoryEntry,
    KeywordDetail,
    NO_SUMMARY_PLACEHOLDER,
    NO_RESPONSE_PLACEHOLDER,
)
from .session_schema import CrawlSession, CrawlStatus, StatusChange, OpenedSession, ALLOWED_TRANSITIONS

__all__ = [
    "ChatMessage", "ChatRole",
    "CrawlResult", "DiscussionReply", "HistoryEntry", "KeywordDetail",
    "NO_SUMMARY_PLACEHOLDER", "NO_RESPONSE_PLACEHOLDER",
    "CrawlSession", "CrawlStatus", "StatusChange", "OpenedSession", "ALLOWED_TRANSITIONS",
]
