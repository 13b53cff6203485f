"""Validation middleware for request payload size and JSON structure."""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import structlog
import orjson

log = structlog.get_logger()


class BodyLimitMiddleware(BaseHTTPMiddleware):
    """Rejects oversized bodies and malformed JSON before routing."""

    def __init__(self, app, max_body_size: int = 65536):
        super().__init__(app)
        self.max_body_size = max_body_size

    def _too_large(self, request: Request, size: int) -> JSONResponse:
        log.warning(
            "payload.too_large",
            size=size,
            max_size=self.max_body_size,
            path=request.url.path
        )
        return JSONResponse(
            status_code=413,
            content={
                "error": "Payload too large",
                "max_size": self.max_body_size,
            }
        )

    async def dispatch(self, request: Request, call_next):
        if request.method not in ("POST", "PUT", "PATCH"):
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_size:
            return self._too_large(request, int(content_length))

        if request.headers.get("content-type", "").startswith("application/json"):
            # Starlette caches the body, so the route can read it again
            body = await request.body()
            if len(body) > self.max_body_size:
                return self._too_large(request, len(body))

            if body:
                try:
                    orjson.loads(body)
                except orjson.JSONDecodeError:
                    # Never echo the body; it may contain a password
                    log.warning("invalid.json", path=request.url.path)
                    return JSONResponse(
                        status_code=400,
                        content={"error": "Invalid JSON"}
                    )

        return await call_next(request)
