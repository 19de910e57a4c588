from .controller import SessionController, CRAWL_ERROR_TEXT, CHAT_FALLBACK_TEXT
from .validation import is_valid_url, normalize_url

__all__ = ["SessionController", "CRAWL_ERROR_TEXT", "CHAT_FALLBACK_TEXT", "is_valid_url", "normalize_url"]
