"""OpenTelemetry tracing helpers for the reporting API."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanProcessor,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.trace import Span

_TRACER_NAME = "chargeview"


def _span_processor(endpoint: str | None) -> SpanProcessor:
    if endpoint:
        return BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
    return SimpleSpanProcessor(ConsoleSpanExporter())


def _create_tracer_provider(
    service_name: str, version: str | None, endpoint: str | None, sample_ratio: float
) -> TracerProvider:
    attributes = {SERVICE_NAME: service_name}
    if version:
        attributes[SERVICE_VERSION] = version
    provider = TracerProvider(
        resource=Resource(attributes=attributes),
        sampler=ParentBased(TraceIdRatioBased(sample_ratio)),
    )
    provider.add_span_processor(_span_processor(endpoint))
    return provider


def initialise_tracing(
    *,
    service_name: str,
    version: str | None = None,
    endpoint: str | None = None,
    sample_ratio: float = 1.0,
    instrument_logging: bool = True,
) -> None:
    """Install a global tracer provider unless one for ``service_name`` is already active.

    Spans go to the OTLP collector at ``endpoint`` when given, otherwise to stdout.
    """

    current_provider = trace.get_tracer_provider()
    if (
        isinstance(current_provider, TracerProvider)
        and current_provider.resource.attributes.get(SERVICE_NAME) == service_name
    ):
        return

    trace.set_tracer_provider(
        _create_tracer_provider(service_name, version, endpoint, sample_ratio)
    )
    if instrument_logging:
        LoggingInstrumentor().instrument(set_logging_format=True)


def instrument_fastapi_app(app: FastAPI) -> None:
    """Trace incoming requests; the scrape and probe endpoints are left out."""
    FastAPIInstrumentor().instrument_app(app, excluded_urls="metrics,api/healthz,api/readyz")


def instrument_sqlalchemy_engine(engine: Any) -> None:
    """Trace every statement the engine executes."""
    SQLAlchemyInstrumentor().instrument(engine=engine)


@contextmanager
def query_span(name: str, *, activate: bool = True, **attributes: Any) -> Iterator[Span]:
    """Run a reporting query inside a named span; ``None`` attributes are skipped.

    With ``activate=False`` the span is recorded but never becomes the current
    span, for work spread over the steps of a generator.
    """

    tracer = trace.get_tracer(_TRACER_NAME)
    span_context = tracer.start_as_current_span(name) if activate else tracer.start_span(name)
    with span_context as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
        yield span


__all__ = [
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "query_span",
]
