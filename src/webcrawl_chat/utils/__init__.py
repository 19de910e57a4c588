from .logging import create_logger
from .error_handler import (
    ValidationError,
    NetworkError,
    MalformedResponseError,
    PersistenceError,
    InvalidTransitionError,
    ConfigurationError,
)

__all__ = [
    "create_logger",
    "ValidationError",
    "NetworkError",
    "MalformedResponseError",
    "PersistenceError",
    "InvalidTransitionError",
    "ConfigurationError",
]
