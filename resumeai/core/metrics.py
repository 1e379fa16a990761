"""Prometheus metrics for the application."""

import time

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# --- Metrics ---

APP_INFO = Info("resumeai", "Resume AI gateway application info")
APP_INFO.info({"version": "1.0.0", "name": "resumeai"})

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60],
)

PROVIDER_ATTEMPTS = Counter(
    "llm_provider_attempts_total",
    "Provider attempts by classified outcome",
    ["provider", "outcome"],
)

PROVIDER_ATTEMPT_DURATION = Histogram(
    "llm_provider_attempt_duration_seconds",
    "Wall time of a single provider attempt",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1, 2.5, 5, 10, 25, 60],
)

INVOCATIONS = Counter(
    "llm_invocations_total",
    "Fallback chain invocations by final status",
    ["status"],
)

RECOVERY_RESULTS = Counter(
    "llm_structured_recovery_total",
    "Structured recovery results",
    ["result"],
)


# --- Middleware ---


def _route_label(request: Request) -> str:
    """Route template (``/api/v1/resume/generate``) or "unmatched"."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Collect HTTP request metrics, labelled by route template."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        path = _route_label(request)
        REQUEST_COUNT.labels(method=request.method, path=path, status=response.status_code).inc()
        REQUEST_DURATION.labels(method=request.method, path=path).observe(duration)

        return response


def metrics_response() -> Response:
    """Prometheus exposition of the default registry."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
