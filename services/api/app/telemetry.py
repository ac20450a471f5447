from __future__ import annotations

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_fastapi_instrumentator import Instrumentator

from studymate_shared import Settings

_logger = logging.getLogger(__name__)
_METRICS_INSTRUMENTED = False
_TRACING_CONFIGURED = False


def setup_observability(app: FastAPI, settings: Settings) -> None:
    """Expose ``/metrics`` and, when an OTLP endpoint is set, export traces.

    Spans opened by the answering service (``answer.document`` and
    ``answer.corpus``) nest under the FastAPI request spans.
    """

    global _METRICS_INSTRUMENTED
    global _TRACING_CONFIGURED

    # Collectors live in the process-wide registry and can only be created once.
    if settings.enable_metrics and not _METRICS_INSTRUMENTED:
        Instrumentator(excluded_handlers=["/metrics", "/system/health"]).instrument(app).expose(
            app, include_in_schema=False
        )
        _METRICS_INSTRUMENTED = True
        _logger.info("metrics instrumentation enabled")

    if not settings.otel_exporter_endpoint:
        return

    if not _TRACING_CONFIGURED:
        resource = Resource(
            attributes={
                "service.name": settings.service_name,
                "service.namespace": "studymate",
                "deployment.environment": settings.env,
            }
        )
        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_endpoint)))
        trace.set_tracer_provider(tracer_provider)
        LoggingInstrumentor().instrument(set_logging_format=True)
        _TRACING_CONFIGURED = True
        _logger.info("opentelemetry exporter configured", extra={"endpoint": settings.otel_exporter_endpoint})

    FastAPIInstrumentor.instrument_app(app)
