"""
Prometheus metrics for the lesson catalog API
"""
from prometheus_client import Counter, Histogram, Gauge, Info
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Application info
app_info = Info("lessons_app", "Lesson viewer application information")
app_info.info({
    "version": "0.1.0",
    "name": "Lesson Viewer",
})

# HTTP request metrics
http_requests_total = Counter(
    "lessons_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "lessons_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

http_requests_in_progress = Gauge(
    "lessons_http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"]
)

# Content store metrics
store_scan_duration_seconds = Histogram(
    "lessons_store_scan_duration_seconds",
    "Time spent scanning and parsing the content directory",
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0)
)

lessons_skipped_total = Counter(
    "lessons_skipped_total",
    "Lesson files left out of the catalog",
    ["reason"]  # parse, validation, duplicate
)

lesson_lookups_total = Counter(
    "lessons_lookups_total",
    "Single lesson lookups",
    ["result"]  # found, not_found, malformed
)

# Sandbox metrics
sandbox_documents_total = Counter(
    "lessons_sandbox_documents_total",
    "Runner documents built for the execution frame"
)

# Error metrics
errors_total = Counter(
    "lessons_errors_total",
    "Total application errors",
    ["error_type", "endpoint"]
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP request metrics
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip metrics endpoint to avoid self-monitoring loops
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = normalize_endpoint(request.url.path)

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()

        try:
            response = await call_next(request)
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(time.time() - start_time)
            return response

        except Exception as e:
            errors_total.labels(
                error_type=type(e).__name__,
                endpoint=endpoint
            ).inc()
            raise

        finally:
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()


def normalize_endpoint(path: str) -> str:
    """
    Collapse lesson ids and static paths so label cardinality stays bounded
    """
    if path.startswith("/core/"):
        return "/static"

    parts = path.rstrip("/").split("/")
    # /api/lessons/12 -> /api/lessons/{id}
    if len(parts) == 4 and parts[1:3] == ["api", "lessons"]:
        return "/api/lessons/{id}"
    # /lessons/12 -> /lessons/{id}
    if len(parts) == 3 and parts[1] == "lessons":
        return "/lessons/{id}"
    return path or "/"


def record_store_scan(duration: float):
    """Record one full pass over the content directory"""
    store_scan_duration_seconds.observe(duration)


def record_lesson_skipped(reason: str):
    """Record a lesson file dropped from the catalog"""
    lessons_skipped_total.labels(reason=reason).inc()


def record_lesson_lookup(result: str):
    lesson_lookups_total.labels(result=result).inc()


def record_sandbox_document():
    sandbox_documents_total.inc()
