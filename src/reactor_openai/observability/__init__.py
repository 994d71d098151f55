"""Observability helpers: structlog configuration and log redaction."""

from reactor_openai.observability.logging import (
    LoggingConfig,
    configure_from_config,
    configure_logging,
    redact_event_dict,
    redact_text,
)

__all__ = [
    "LoggingConfig",
    "configure_from_config",
    "configure_logging",
    "redact_event_dict",
    "redact_text",
]
