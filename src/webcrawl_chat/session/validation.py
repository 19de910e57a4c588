import re
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

from webcrawl_chat.utils.error_handler import ValidationError

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
MIN_HOSTNAME_LENGTH = 3


def normalize_url(url: str) -> str:
    """Default to https when the URL carries no scheme."""
    url = url.strip()
    if not _SCHEME_RE.match(url):
        url = f"https://{url}"
    return url


def is_valid_url(url: str) -> bool:
    """A URL is well-formed if its hostname is at least 3 characters and contains a dot."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        hostname = urlsplit(normalize_url(url)).hostname
    except ValueError:
        return False
    if not hostname or len(hostname) < MIN_HOSTNAME_LENGTH:
        return False
    if any(ch.isspace() for ch in hostname):
        return False
    return "." in hostname


def validate_keyword(keyword: Optional[str]) -> str:
    if keyword is None or not keyword.strip():
        raise ValidationError("Please enter a keyword", {"field": "keyword"})
    return keyword.strip()


def validate_urls(urls: Sequence[str]) -> List[str]:
    """Validate every candidate URL and return them normalized."""
    invalid = [url for url in urls if not is_valid_url(url)]
    if invalid:
        raise ValidationError(
            f"Invalid URL(s): {', '.join(repr(url) for url in invalid)}",
            {"field": "urls", "invalid": invalid}
        )
    return [normalize_url(url) for url in urls]


def validate_target(domain: Optional[str], urls: Optional[Sequence[str]]) -> tuple[Optional[str], List[str]]:
    """Resolve what to crawl: a non-empty URL list wins over the domain.

    Returns:
        ``(domain, [])`` for a domain crawl or ``(None, urls)`` for a URL-list crawl
    """
    if urls:
        return None, validate_urls(urls)
    if domain is None or not domain.strip():
        raise ValidationError("Please enter both keyword and domain, or at least one URL", {"field": "domain"})
    return domain.strip(), []


def validate_prompt(session_id: Optional[str], prompt: Optional[str]) -> None:
    if session_id is None or not str(session_id).strip():
        raise ValidationError("A session id is required to chat", {"field": "session_id"})
    if prompt is None or not prompt.strip():
        raise ValidationError("Please enter a message", {"field": "prompt"})
