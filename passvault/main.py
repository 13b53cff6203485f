"""
Passvault: a single-user credential vault.

- POST /api/auth/login exchanges the master password for a session token
- /api/items stores records with AES-256-GCM encrypted passwords
- GET /api/generate-password draws random passwords
- /health, /health/ready and /metrics for operations
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from .api.router import router
from .config import get_settings
from .dependencies import SERVICE_NAME, VERSION, get_record_service, metrics
from .health import HealthChecker
from .logging import get_logger, setup_logging
from .middleware import (
    BodyLimitMiddleware,
    CorrelationIdMiddleware,
    ErrorHandlerMiddleware,
    MetricsMiddleware,
    register_exception_handlers,
)

settings = get_settings()
setup_logging(json_output=settings.LOG_JSON, service_name=SERVICE_NAME)
logger = get_logger()

health_checker = HealthChecker(
    store=get_record_service().store,
    service_name=SERVICE_NAME,
    version=VERSION,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "service.starting",
        version=VERSION,
        env=settings.ENV,
        record_store=settings.RECORD_STORE,
        session_duration=settings.SESSION_DURATION,
    )
    yield
    logger.info("service.stopping")
    metrics.app_up.labels(service=SERVICE_NAME, version=VERSION).set(0)
    close = getattr(get_record_service().store, "close", None)
    if close is not None:
        close()


app = FastAPI(
    title="Passvault",
    version=VERSION,
    description="Credential vault with signed session tokens and encrypted-at-rest passwords",
    lifespan=lifespan,
)
register_exception_handlers(app)

# Starlette wraps in reverse order: CORS is outermost, ErrorHandler innermost
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(BodyLimitMiddleware, max_body_size=settings.MAX_BODY_SIZE)
app.add_middleware(MetricsMiddleware, metrics=metrics)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(router)
app.mount("/metrics", make_asgi_app(registry=metrics.registry))


@app.get("/health", tags=["ops"])
async def health():
    """Liveness check."""
    return health_checker.liveness()


@app.get("/health/ready", tags=["ops"])
async def health_ready():
    """Readiness check: 200 when ready, 503 otherwise."""
    result = await health_checker.readiness()
    return JSONResponse(
        content=result,
        status_code=200 if result["status"] == "ready" else 503,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "passvault.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=settings.ENV == "dev",
    )
