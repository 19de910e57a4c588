from pydantic import BaseModel, Field
from typing import Dict, FrozenSet, List, Optional
from enum import Enum
from datetime import datetime

from webcrawl_chat.schemas.backend_schema import CrawlResult, KeywordDetail
from webcrawl_chat.schemas.chat_schema import ChatMessage, utcnow
from webcrawl_chat.utils.error_handler import InvalidTransitionError


class CrawlStatus(str, Enum):
    """Lifecycle of a crawl request, from submission to displayed result."""
    IDLE = "Idle"                # Created, nothing checked yet
    VALIDATING = "Validating"    # Input is being checked
    REQUESTING = "Requesting"    # Backend crawl call in flight
    SUCCEEDED = "Succeeded"      # Backend returned a result
    STREAMING = "Streaming"      # Summary is being revealed
    COMPLETED = "Completed"      # Summary fully revealed
    FAILED = "Failed"            # Terminal; retry needs a new session


ALLOWED_TRANSITIONS: Dict[CrawlStatus, FrozenSet[CrawlStatus]] = {
    CrawlStatus.IDLE: frozenset({CrawlStatus.VALIDATING}),
    CrawlStatus.VALIDATING: frozenset({CrawlStatus.REQUESTING, CrawlStatus.FAILED}),
    CrawlStatus.REQUESTING: frozenset({CrawlStatus.SUCCEEDED, CrawlStatus.FAILED}),
    CrawlStatus.SUCCEEDED: frozenset({CrawlStatus.STREAMING}),
    CrawlStatus.STREAMING: frozenset({CrawlStatus.COMPLETED}),
    CrawlStatus.COMPLETED: frozenset(),
    CrawlStatus.FAILED: frozenset(),
}


class StatusChange(BaseModel):
    """One entry of a session's status history."""
    status: CrawlStatus
    timestamp: datetime = Field(default_factory=utcnow)
    message: str = Field(default="")


class CrawlSession(BaseModel):
    """A single crawl submission and its result.

    The id is assigned by the backend on the first successful crawl; until then
    the session is only addressable by its input parameters.
    """
    keyword: str
    site_domain: Optional[str] = None
    candidate_urls: List[str] = Field(default_factory=list)

    id: Optional[str] = None
    summary: str = ""
    urls: List[str] = Field(default_factory=list)
    urls_crawled: int = 0

    status: CrawlStatus = Field(default=CrawlStatus.IDLE)
    generation: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    status_history: List[StatusChange] = Field(default_factory=list)

    def transition(self, new_status: CrawlStatus, message: str = "") -> None:
        """Move the session forward, rejecting anything the lifecycle does not allow."""
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Cannot move crawl session from {self.status.value} to {new_status.value}",
                {"from": self.status.value, "to": new_status.value, "keyword": self.keyword}
            )
        self.status = new_status
        self.status_history.append(StatusChange(status=new_status, message=message))

    def apply_result(self, result: CrawlResult) -> None:
        if self.id is not None:
            raise InvalidTransitionError(
                f"Crawl session {self.id} already has an id",
                {"id": self.id}
            )
        self.id = result.keyword_id
        self.summary = result.summary
        self.urls = list(result.urls)
        self.urls_crawled = result.urls_crawled

    def clear_result(self) -> None:
        self.id = None
        self.summary = ""
        self.urls = []
        self.urls_crawled = 0

    @property
    def is_terminal_status(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    @property
    def target(self) -> str:
        """Human readable description of what was crawled."""
        if self.candidate_urls:
            return ", ".join(self.candidate_urls)
        return self.site_domain or ""


class OpenedSession(BaseModel):
    """A previously created crawl session, reopened for chatting."""
    session_id: str
    detail: Optional[KeywordDetail] = None
    messages: List[ChatMessage] = Field(default_factory=list)
