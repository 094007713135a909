"""Logging helpers that keep secrets and internals out of production logs."""

import logging
import re
from functools import lru_cache
from typing import Any

from rbac_api.config import get_settings

MAX_LOGGED_MESSAGE_LENGTH = 200

_PATH_PATTERN = re.compile(r"['\"]?(/[a-zA-Z0-9_./\-]+|[A-Z]:\\[^\s'\"]+)['\"]?")
_URL_PATTERN = re.compile(r"(postgresql|postgres|sqlite|redis|rediss|http|https)(\+\w+)?://[^\s]+")
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
# Query-string API keys, e.g. ?key=... on the Gemini endpoint
_KEY_PARAM_PATTERN = re.compile(r"(key|api_key|token)=[^\s&]+", re.IGNORECASE)
_TOKEN_PATTERN = re.compile(r"[a-zA-Z0-9_\-]{32,}")


@lru_cache(maxsize=1)
def is_debug_mode() -> bool:
    """Check if application is running in debug mode."""
    return get_settings().debug


def sanitize_exception_message(error: Exception) -> str:
    """Strip paths, connection strings, emails and credentials from an error.

    Args:
        error: The exception to sanitize

    Returns:
        Message suitable for production logs
    """
    message = str(error)
    message = _URL_PATTERN.sub("[URL]", message)
    message = _PATH_PATTERN.sub("[PATH]", message)
    message = _EMAIL_PATTERN.sub("[EMAIL]", message)
    message = _KEY_PARAM_PATTERN.sub(r"\1=[REDACTED]", message)
    message = _TOKEN_PATTERN.sub("[TOKEN]", message)

    if len(message) > MAX_LOGGED_MESSAGE_LENGTH:
        message = message[: MAX_LOGGED_MESSAGE_LENGTH - 3] + "..."
    return message


def _log(
    logger: logging.Logger,
    level: int,
    message: str,
    error: Exception | None,
    exc_info: bool,
    extra: dict[str, Any],
) -> None:
    if is_debug_mode():
        text = f"{message}: {error}" if error else message
        logger.log(level, text, exc_info=exc_info and error is not None, extra=extra)
        return

    # Extra context is dropped outside debug mode since it may carry user input
    if error:
        logger.log(level, f"{message}: {sanitize_exception_message(error)}")
    else:
        logger.log(level, message)


def log_error(
    logger: logging.Logger,
    message: str,
    error: Exception | None = None,
    **kwargs: Any,
) -> None:
    """Log an error with detail appropriate to the environment.

    In debug mode the full exception and traceback are logged. Otherwise
    only a sanitized message is written.

    Args:
        logger: The logger instance to use
        message: Generic log message without sensitive data
        error: Optional exception to include
        **kwargs: Additional context, logged in debug mode only
    """
    _log(logger, logging.ERROR, message, error, True, kwargs)


def log_warning(
    logger: logging.Logger,
    message: str,
    error: Exception | None = None,
    **kwargs: Any,
) -> None:
    """Log a warning with detail appropriate to the environment.

    Args:
        logger: The logger instance to use
        message: Generic log message without sensitive data
        error: Optional exception to include
        **kwargs: Additional context, logged in debug mode only
    """
    _log(logger, logging.WARNING, message, error, False, kwargs)
