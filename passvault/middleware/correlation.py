"""Request correlation ids.

An incoming X-Correlation-ID is reused when it looks like an opaque id;
otherwise a fresh UUID4 is issued. The id is bound into structlog's
context for the request and echoed on the response.
"""
import re
import uuid
from contextvars import ContextVar

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

HEADER = "x-correlation-id"

# Letters, digits, dot, dash and underscore; at most 128 characters
_VALID_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def _accept_or_issue(candidate: str | None) -> str:
    if candidate and _VALID_ID.match(candidate):
        return candidate
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to every request, log line and response."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = _accept_or_issue(request.headers.get(HEADER))
        token = correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            http_method=request.method,
            http_path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers[HEADER] = correlation_id
        return response


def get_correlation_id() -> str:
    """Correlation id of the request being handled, or "" outside a request."""
    return correlation_id_var.get()
