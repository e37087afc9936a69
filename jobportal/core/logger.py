"""
Logging helpers.

Every module grabs its own logger with get_logger(__name__);
configure_logging() is called once when the app starts.
"""

import logging

from jobportal.core.config import get_settings

_configured = False


def configure_logging() -> None:
    """Apply LOG_LEVEL / LOG_FORMAT from settings to the root logger."""
    global _configured
    if _configured:
        return
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)
    # boto is chatty at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
