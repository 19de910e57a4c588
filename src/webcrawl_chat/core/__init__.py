from .utils import (
    LogLevel,
    ErrorCode,
    WebCrawlChatError,
    setup_logging,
)
from .interfaces import Storage
from .base import BaseStorage

__all__ = [
    # Interfaces
    'Storage',

    # Base classes
    'BaseStorage',

    # Utilities
    'LogLevel',
    'ErrorCode',
    'WebCrawlChatError',
    'setup_logging',
]
