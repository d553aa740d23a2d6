"""Exception hierarchy and shared error-handling helpers."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class JourneyEngineError(Exception):
    """Base class for errors raised by the journey engine."""


class KnowledgeBaseError(JourneyEngineError):
    """The knowledge base file is missing, unreadable, or malformed."""


class ConfigError(JourneyEngineError):
    """An engine configuration file could not be loaded."""


def log_and_return_error(*, command: str, exc: Exception, user_message: str) -> str:
    """Log full exception details while returning a safe user-facing message."""
    logger.exception("Command '%s' failed", command, exc_info=exc)
    return user_message
