"""
Error message sanitization utility.

Validation messages are written for the entry form and pass through; anything
that looks like an internal detail (paths, SQL, keys) is replaced by a
generic message before it reaches a client.
"""

from __future__ import annotations

import re

from historian.observability.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    # File paths
    r"/[^\s]+\.py",
    r"[A-Za-z]:\\[^\s]+",
    # Stack trace indicators
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    # Database errors
    r"sqlite3?\.",
    r"no such table",
    r"no such column",
    # API keys / secrets
    r"AIza[0-9A-Za-z_-]{20,}",
    r"Bearer [A-Za-z0-9._-]+",
    # Internal module names
    r"historian\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    401: "Access key required.",
    404: "Record not found.",
    422: "Invalid data format.",
    500: "An internal error occurred. Please try again later.",
    502: "The AI service could not complete the request.",
}


def sanitize_error_message(message: str, status_code: int = 500) -> str:
    """
    Args:
        message: The original error message
        status_code: HTTP status code (selects the generic fallback)

    Returns:
        The message itself when it is short and clean, otherwise a generic one
    """
    if not message:
        return GENERIC_MESSAGES.get(status_code, "An error occurred.")

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, message, re.IGNORECASE):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return GENERIC_MESSAGES.get(status_code, "An error occurred.")

    if status_code < 500 and len(message) < 200 and "\n" not in message:
        return message

    return GENERIC_MESSAGES.get(status_code, "An error occurred.")
