"""OpenTelemetry tracing.

Tracing stays off until ``OBSERVABILITY_CONFIG__ENABLE_TRACING`` is set.
Once on, finished spans go to one of three places:

``console``
    the application log, as Loguru debug records
``otlp``
    an OpenTelemetry collector over gRPC
``none``
    nowhere; spans are still sampled and propagated
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Final

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from tenantry.core.context import RequestContext

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    from fastapi import FastAPI

    from tenantry.core.config import Settings

TENANT_KEY: Final = "tenant.domain"
CORRELATION_KEY: Final = "correlation_id"
DEFAULT_OTLP_ENDPOINT: Final = "http://localhost:4317"

# Per-message ASGI and driver spans, one request produces dozens of them
NOISY_SPANS: Final = frozenset(
    {"connect", "http send", "http receive", "cursor.execute"}
)


class LoguruSpanExporter(SpanExporter):
    """Writes each finished span to the log at DEBUG level."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        for span in spans:
            ids = span.get_span_context()
            if ids is None or span.name in NOISY_SPANS:
                continue
            elapsed_ms = (
                (span.end_time - span.start_time) // 1_000_000
                if span.start_time and span.end_time
                else None
            )
            logger.bind(
                trace_id=f"0x{ids.trace_id:032x}",
                span_id=f"0x{ids.span_id:016x}",
                span_name=span.name,
                duration_ms=elapsed_ms,
                attributes=dict(span.attributes or {}),
                status=span.status.status_code.name,
            ).debug("Span {} finished", span.name)
        return SpanExportResult.SUCCESS


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    """Exporter for ``observability_config.exporter_type``, or ``None``."""
    config = settings.observability_config
    match config.exporter_type:
        case "console":
            return LoguruSpanExporter()
        case "otlp":
            endpoint = config.exporter_endpoint or DEFAULT_OTLP_ENDPOINT
            logger.info("Exporting spans to {}", endpoint)
            return OTLPSpanExporter(
                endpoint=endpoint, insecure=settings.environment == "development"
            )
        case _:
            logger.info("Span export disabled")
            return None


@lru_cache(maxsize=1)
def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def setup_tracing(settings: Settings) -> None:
    """Install a sampled tracer provider when tracing is enabled."""
    config = settings.observability_config
    if not config.enable_tracing:
        logger.info("Tracing disabled")
        return

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.app_name,
                "service.version": settings.app_version,
                "deployment.environment": settings.environment,
            }
        ),
        sampler=TraceIdRatioBased(config.trace_sample_rate),
    )
    if exporter := get_span_exporter(settings):
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    logger.info(
        "Tracing enabled",
        exporter_type=config.exporter_type,
        sample_rate=config.trace_sample_rate,
    )


def instrument_app(app: FastAPI, settings: Settings) -> None:
    """Open a server span per request, and per query with the database store.

    Probes and documentation pages are not traced.
    """
    if not settings.observability_config.enable_tracing:
        return

    prefix = settings.api_prefix
    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=f"{prefix}/health,{prefix}/readiness,/docs,/redoc,/openapi.json",
        server_request_hook=add_request_context_to_span,
    )
    if settings.tenant_config.user_store == "database":
        SQLAlchemyInstrumentor().instrument(enable_commenter=True)
    logger.info("FastAPI instrumented")


def add_request_context_to_span(span: trace.Span, scope: dict[str, Any]) -> None:
    """Tag the server span with the correlation ID and the requested host.

    The instrumentation opens the span before the tenant is resolved, so the
    bare ``Host`` header stands in for the tenant domain.
    """
    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute(CORRELATION_KEY, correlation_id)
    host = dict(scope.get("headers", [])).get(b"host", b"").decode("latin-1")
    if host:
        span.set_attribute(TENANT_KEY, host.partition(":")[0].lower())


@contextmanager
def trace_operation(
    name: str, **attributes: str | int | float | bool
) -> Generator[trace.Span]:
    """Run a block inside its own span.

    The span carries ``attributes`` plus the correlation ID and tenant of
    the running request. An exception marks the span as failed and
    propagates.

    Yields:
        trace.Span: The open span.
    """
    with get_tracer(__name__).start_as_current_span(name) as span:
        span.set_attributes(attributes)
        if correlation_id := RequestContext.get_correlation_id():
            span.set_attribute(CORRELATION_KEY, correlation_id)
        if tenant := RequestContext.get_tenant_domain():
            span.set_attribute(TENANT_KEY, tenant)
        yield span
