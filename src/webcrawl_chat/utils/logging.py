import logging
from pathlib import Path
from typing import Optional, Union

from webcrawl_chat.core.utils import LogLevel, setup_logging

PACKAGE_LOGGER = "webcrawl_chat"


def create_logger(
    log_level: Union[str, LogLevel, None] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Return the package logger, configuring the root logger when a level is given."""
    if log_level is not None:
        setup_logging(log_level, log_file)
    return logging.getLogger(PACKAGE_LOGGER)
