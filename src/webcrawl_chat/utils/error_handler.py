# custom error handler
from typing import Any, Dict, Optional

from webcrawl_chat.core.utils import ErrorCode, WebCrawlChatError


class ValidationError(WebCrawlChatError):
    """Raised for bad or missing input, before any network call is made."""
    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class NetworkError(WebCrawlChatError):
    """Raised on transport failure, timeout or a non-2xx backend response."""
    def __init__(
        self,
        message: str = "Backend request failed",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, ErrorCode.NETWORK_ERROR, details)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class MalformedResponseError(WebCrawlChatError):
    """Raised when a backend payload does not have the expected shape."""
    def __init__(self, message: str = "Malformed backend response", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorCode.MALFORMED_RESPONSE, details)


class PersistenceError(WebCrawlChatError):
    """Raised when local storage cannot be read or written."""
    def __init__(self, message: str = "Storage operation failed", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorCode.STORAGE_ERROR, details)


class InvalidTransitionError(WebCrawlChatError):
    """Raised when a crawl session is moved to a status it cannot reach."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorCode.STATE_ERROR, details)


class ConfigurationError(WebCrawlChatError):
    """Raised when the application configuration cannot be loaded."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)
