"""
Logging helpers for the storefront client.

The library logs through the standard ``logging`` hierarchy rooted at
``storefront_client`` and leaves handler configuration to the embedding
application. Credentials must never reach a log record, so a redaction
filter is installed on the package logger.
"""

import logging
import re

from storefront_client.compat import Any


LOGGER_NAME = "storefront_client"

_JWT_RE = re.compile(r"\beyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\b")
_BEARER_RE = re.compile(r"(?i)\bBearer\s+([A-Za-z0-9_\-\.=]+)")
_KV_RE = re.compile(
    r"(?i)\b(jwtToken|refreshToken|access_token|password|xsrf-token|csrf)\b(\s*[=:]\s*)([^\s,;)]+)"
)

REDACTED = "***"


def redact(value: Any) -> Any:
    """Masks bearer tokens, JWTs and credential key/value pairs in strings."""
    if not isinstance(value, str):
        return value
    value = _BEARER_RE.sub(f"Bearer {REDACTED}", value)
    value = _JWT_RE.sub(REDACTED, value)
    return _KV_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", value)


class RedactingFilter(logging.Filter):
    """
    Renders a record's message and masks secrets in the result.

    Redaction works on the final text: masking the template would also eat
    the ``%s`` placeholders that follow a ``key=``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Left as is for the handler to report the formatting error.
            return True

        record.msg = redact(message)
        record.args = ()
        return True


def get_logger(name: str) -> logging.Logger:
    """
    Returns a child of the package logger.

    Filters attached to a logger only apply to records created on that
    logger, so the redaction filter is attached to every child handed out.
    """
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(f, RedactingFilter) for f in logger.filters):
        logger.addFilter(RedactingFilter())
    return logger


logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())
