"""
Logging utilities for the FastAPI application and the refresh sweep.

Provides a consistent logging format and keeps OAuth secrets out of log output.
"""

import logging
import re
import sys

_SECRET_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9\-._~+/]+=*"),
    re.compile(
        r"(?i)((?:access_token|refresh_token|client_secret)[\"']?\s*[=:]\s*[\"']?)[^\"'&\s,}]+"
    ),
)


def redact_secrets(message: str) -> str:
    """Mask bearer tokens and token-like query/body values in ``message``."""
    for pattern in _SECRET_PATTERNS:
        message = pattern.sub(r"\1[REDACTED]", message)
    return message


class SecretRedactingFilter(logging.Filter):
    """Rewrite log records so provider payloads never leak credentials."""

    def filter(self, record: logging.LogRecord) -> bool:
        rendered = record.getMessage()
        redacted = redact_secrets(rendered)
        if redacted != rendered:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SecretRedactingFilter) for f in handler.filters):
            handler.addFilter(SecretRedactingFilter())


__all__ = ["SecretRedactingFilter", "configure_logging", "redact_secrets"]
