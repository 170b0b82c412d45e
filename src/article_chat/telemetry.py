"""Tracing for the article chat backend.

``OBSERVABILITY`` selects the backend:

- ``"logfire"``: Pydantic Logfire (set ``LOGFIRE_TOKEN`` env var)
- ``"otel"``: raw OpenTelemetry with OTLP HTTP exporter
- ``"off"``: no tracing (default)

When tracing is on, the FastAPI app, outgoing provider calls and every
PydanticAI agent run are traced.
"""

from __future__ import annotations

from fastapi import FastAPI
from loguru import logger

from article_chat import __version__
from article_chat.config import Settings


def setup_telemetry(app: FastAPI, settings: Settings) -> bool:
    """Initialise the tracing backend; return True when tracing is active."""
    if settings.observability == "off":
        logger.info("Observability disabled (OBSERVABILITY=off)")
        return False

    if settings.observability == "logfire":
        _setup_logfire(app, settings)
    else:
        _setup_otel(app, settings)

    _instrument_agents()
    return True


def _setup_logfire(app: FastAPI, settings: Settings) -> None:
    import logfire

    logfire.configure(service_name=settings.otel_service_name, service_version=__version__)
    logfire.instrument_fastapi(app)
    # Anthropic adapter traffic
    logfire.instrument_httpx()

    logger.info("Logfire enabled | service={}", settings.otel_service_name)


def _setup_otel(app: FastAPI, settings: Settings) -> None:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    tracer_provider = TracerProvider(
        resource=Resource.create(
            {"service.name": settings.otel_service_name, "service.version": __version__}
        )
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(endpoint=f"{settings.otel_exporter_otlp_endpoint}/v1/traces")
        )
    )
    trace.set_tracer_provider(tracer_provider)
    FastAPIInstrumentor.instrument_app(app)

    logger.info(
        "OpenTelemetry enabled | service={} | endpoint={}",
        settings.otel_service_name,
        settings.otel_exporter_otlp_endpoint,
    )


def _instrument_agents() -> None:
    from pydantic_ai import Agent
    from pydantic_ai.models.instrumented import InstrumentationSettings

    Agent.instrument_all(InstrumentationSettings())
    logger.debug("PydanticAI agent runs instrumented")
