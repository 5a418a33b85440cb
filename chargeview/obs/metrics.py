"""Prometheus metrics utilities for the reporting API."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_LATENCY_SECONDS = Histogram(
    "http_request_latency_seconds",
    "Latency of HTTP requests in seconds.",
    labelnames=("method", "path"),
)
REQUEST_COUNTER = Counter(
    "http_requests_total",
    "Total number of HTTP requests processed.",
    labelnames=("method", "path", "status"),
)
REQUEST_ERROR_COUNTER = Counter(
    "http_request_errors_total",
    "Total number of HTTP requests that resulted in server errors.",
    labelnames=("method", "path", "status"),
)
TRANSACTION_DETAIL_LOOKUPS = Counter(
    "transaction_detail_lookups_total",
    "Transaction detail lookups by outcome.",
    labelnames=("outcome",),
)
METER_VALUES_RETURNED = Histogram(
    "transaction_meter_values_returned",
    "Number of reconciled meter values returned per transaction detail lookup.",
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 1000),
)
CSV_EXPORT_ROWS = Counter(
    "transaction_csv_export_rows_total",
    "Count of transaction rows written by CSV exports.",
)


def _route_label(request: Request) -> str:
    """Path template of the matched route, so ids in the URL never become label values."""
    path = request.url.path
    template = getattr(request.scope.get("route"), "path_format", None)
    if template is None:
        return path
    # routes of an included router may report their template without the router prefix
    depth = template.count("/")
    prefix = path.rsplit("/", depth)[0] if path.count("/") > depth else ""
    return prefix + template


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records request count, latency and server errors per route template."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        method = request.method
        start_time = time.perf_counter()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            latency = time.perf_counter() - start_time
            path = _route_label(request)
            if status.startswith("5"):
                REQUEST_ERROR_COUNTER.labels(method=method, path=path, status=status).inc()
            REQUEST_LATENCY_SECONDS.labels(method=method, path=path).observe(latency)
            REQUEST_COUNTER.labels(method=method, path=path, status=status).inc()


metrics_router = APIRouter(tags=["observability"])


@metrics_router.get("/metrics", include_in_schema=False)
def metrics_endpoint() -> Response:
    """Expose Prometheus metrics for scraping."""
    payload = generate_latest()
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


def record_detail_lookup(outcome: str, value_count: int = 0) -> None:
    """Count a detail lookup and, when found, how many meter values it produced."""
    TRANSACTION_DETAIL_LOOKUPS.labels(outcome=outcome).inc()
    if outcome == "found":
        METER_VALUES_RETURNED.observe(value_count)


__all__ = [
    "CSV_EXPORT_ROWS",
    "METER_VALUES_RETURNED",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "TRANSACTION_DETAIL_LOOKUPS",
    "metrics_endpoint",
    "metrics_router",
    "record_detail_lookup",
]
