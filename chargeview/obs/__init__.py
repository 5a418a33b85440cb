"""Observability utilities."""

from .metrics import (
    CSV_EXPORT_ROWS,
    METER_VALUES_RETURNED,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    TRANSACTION_DETAIL_LOOKUPS,
    PrometheusMiddleware,
    metrics_router,
    record_detail_lookup,
)
from .tracing import (
    initialise_tracing,
    instrument_fastapi_app,
    instrument_sqlalchemy_engine,
    query_span,
)

__all__ = [
    "CSV_EXPORT_ROWS",
    "METER_VALUES_RETURNED",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "TRANSACTION_DETAIL_LOOKUPS",
    "metrics_router",
    "record_detail_lookup",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "query_span",
]
