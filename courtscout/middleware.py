"""FastAPI middleware for Prometheus metrics instrumentation."""
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from courtscout.metrics import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_PROGRESS,
    HTTP_RESPONSE_SIZE_BYTES,
)

# Probes and the scrape endpoint itself are not worth recording
EXCLUDE_PATHS = frozenset({"/metrics", "/health", "/ping"})


def normalize_path(path: str) -> str:
    """Collapse id-like segments: /v1/courts/12345 becomes /v1/courts/{id}."""
    segments = [
        "{id}" if _is_id_segment(segment) else segment
        for segment in path.strip("/").split("/")
    ]
    return "/" + "/".join(segments)


def _is_id_segment(segment: str) -> bool:
    if segment.isdigit():
        return True
    # UUID-like or long alphanumeric slugs
    return len(segment) >= 20 and segment.replace("-", "").isalnum()


def endpoint_label(request: Request) -> str:
    """Route template when the request matched one, else the normalized path.

    Every /v1/courts/nearby query shares one label no matter its query string,
    so label cardinality stays bounded by the route table.
    """
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if template:
        return template
    return normalize_path(request.url.path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics for Prometheus."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and collect metrics."""
        if request.url.path in EXCLUDE_PATHS:
            return await call_next(request)

        method = request.method
        # The route is only resolved once the app has handled the request
        in_progress = HTTP_REQUESTS_IN_PROGRESS.labels(
            method=method, endpoint=normalize_path(request.url.path)
        )
        in_progress.inc()
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            in_progress.dec()
            endpoint = endpoint_label(request)
            HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method, endpoint=endpoint
            ).observe(time.perf_counter() - start_time)
            HTTP_REQUESTS_TOTAL.labels(
                method=method, endpoint=endpoint, status_code=str(status_code)
            ).inc()

        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit():
            HTTP_RESPONSE_SIZE_BYTES.labels(method=method, endpoint=endpoint).observe(
                int(content_length)
            )

        return response
