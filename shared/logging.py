"""
Structured logging for the HealthMate API.

Sets up structlog with:
- Environment-based configuration (pretty console in development, JSON in production)
- Redaction of credential-bearing fields (passwords, OTPs, tokens, keys)
- Email masking helper so addresses never appear in full in logs
- stdlib logging bridged so uvicorn/pymongo output shares one stream

Usage:
    >>> from shared.logging import get_logger
    >>> log = get_logger(__name__)
    >>> log.info("account_registered", account_id="665f...")
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

# Keys whose values are replaced before rendering
SENSITIVE_KEY_PARTS = ("password", "otp", "token", "secret", "key", "authorization")

# Keys structlog itself owns; never redacted
_RESERVED_KEYS = {"level", "event", "timestamp", "logger"}


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger bound to *name* (typically ``__name__``)."""
    return structlog.get_logger(name)


def mask_email(email: Optional[str]) -> Optional[str]:
    """Mask an email address for logging: ``alice@example.com`` → ``ali***@example.com``."""
    if not email:
        return email
    local, sep, domain = email.partition("@")
    return f"{local[:3]}***{sep}{domain}"


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _RESERVED_KEYS:
            continue
        lowered = key.lower()
        if any(part in lowered for part in SENSITIVE_KEY_PARTS):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str = "console") -> None:
    """
    Configure structlog with processors for the requested output format.

    "json": one JSON object per line for log shipping
    anything else: coloured console output for development
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str = "INFO") -> None:
    """Route stdlib logging to stdout and quiet noisy third-party loggers."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    # Silence pymongo debug logs (connection pool, server monitoring, etc.)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """
    Initialize logging for the application.

    Should be called once, early in application startup (create_app).
    """
    configure_stdlib_logging(log_level)
    configure_structlog(log_format)

    get_logger(__name__).info(
        "logging_initialized", log_level=log_level, log_format=log_format
    )
