"""
Structured logging for Passvault using structlog.

A JSON line looks like:
{
    "ts": "2025-11-18T04:30:00.123456Z",
    "level": "info",
    "service": "passvault",
    "correlation_id": "uuid-v4",
    "event": "record.created",
    "module": "passvault.services.record_service",
    "func_name": "create_record",
    "lineno": 78,
    "id": 3
}

Callers log ids and outcomes only. As a backstop, any context key that
names secret material is masked before rendering.
"""
import logging
from typing import Any

import structlog

REDACTED = "[redacted]"

SENSITIVE_KEYS = frozenset({
    "password",
    "master_password",
    "token",
    "authorization",
    "secret",
    "encryption_key",
    "encrypted_password",
    "blob",
    "plaintext",
})


def service_name_adder(service_name: str):
    """Build a processor that stamps every entry with the service name."""

    def add_service_name(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict["service"] = service_name
        return event_dict

    return add_service_name


def redact_secrets(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Mask values whose key names secret material."""
    for key in event_dict.keys() & SENSITIVE_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def setup_logging(json_output: bool = True, service_name: str = "passvault", level: int = logging.INFO):
    """
    Configure structlog for the service.

    Args:
        json_output: Render JSON lines; otherwise use the console renderer
        service_name: Value of the "service" field
        level: Minimum level to emit
    """
    processors = [
        # correlation_id and request fields bound by CorrelationIdMiddleware
        structlog.contextvars.merge_contextvars,
        service_name_adder(service_name),
        redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    processors.append(
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level)

    # Request lines come from MetricsMiddleware instead
    logging.getLogger("uvicorn.access").handlers = []
    logging.getLogger("uvicorn.error").handlers = []


def get_logger(**initial_values):
    """Get a structlog logger, optionally pre-bound with context."""
    return structlog.get_logger(**initial_values)
