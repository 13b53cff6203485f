"""Per-request Prometheus metrics and access logging."""
import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

log = structlog.get_logger()


def _route_path(request: Request) -> str:
    # Route template keeps record ids out of label values
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Count, time and log every request except /metrics scrapes.
    """

    def __init__(self, app, metrics):
        super().__init__(app)
        self.metrics = metrics

    def _observe(self, request: Request, status: int, elapsed: float) -> None:
        service = self.metrics.service_name
        path = _route_path(request)
        self.metrics.http_requests_total.labels(
            service=service, method=request.method, path=path, status=status
        ).inc()
        self.metrics.http_request_duration.labels(
            service=service, method=request.method, path=path
        ).observe(elapsed)

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith("/metrics"):
            return await call_next(request)

        started = time.perf_counter()
        with self.metrics.http_requests_active.labels(service=self.metrics.service_name).track_inprogress():
            try:
                response = await call_next(request)
            except Exception as exc:
                elapsed = time.perf_counter() - started
                self._observe(request, 500, elapsed)
                log.error(
                    "http.request_failed",
                    error_type=type(exc).__name__,
                    duration_ms=round(elapsed * 1000, 2),
                )
                raise

        elapsed = time.perf_counter() - started
        self._observe(request, response.status_code, elapsed)
        log.info(
            "http.request",
            http_status=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
        )
        return response
