"""Structured error responses.

Every failure that leaves the service carries a short generic message;
internal causes stay in the logs.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from .correlation import get_correlation_id
from ..services.crypto import AuthenticationError, ConfigurationError, CryptoIntegrityError
from ..services.record_service import RecordNotFoundError

log = structlog.get_logger()

UNAUTHORIZED = "Unauthorized"
INTERNAL_ERROR = "Internal server error"
NOT_FOUND = "Not found"
INVALID_REQUEST = "Invalid request"


def _internal_error() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": INTERNAL_ERROR, "correlation_id": get_correlation_id()},
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last-resort handler for exceptions no route handler claimed."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            log.error(
                "unhandled.exception",
                error_type=exc.__class__.__name__,
                path=request.url.path,
                exc_info=True
            )
            return _internal_error()


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"error": UNAUTHORIZED},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    log.info("policy.rejected", reason=str(exc))
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def integrity_error_handler(request: Request, exc: CryptoIntegrityError) -> JSONResponse:
    log.error("crypto.integrity_error", path=request.url.path)
    return _internal_error()


async def not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": NOT_FOUND})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": NOT_FOUND})
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})
    if exc.status_code >= 500:
        return _internal_error()
    return JSONResponse(status_code=exc.status_code, content={"error": INVALID_REQUEST})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Field locations and messages only; submitted values may be passwords
    fields = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    log.info("request.invalid", path=request.url.path, error_count=len(fields))
    return JSONResponse(status_code=422, content={"error": INVALID_REQUEST, "fields": fields})


def register_exception_handlers(app: FastAPI) -> None:
    """Map vault exceptions to HTTP responses."""
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(CryptoIntegrityError, integrity_error_handler)
    app.add_exception_handler(RecordNotFoundError, not_found_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
