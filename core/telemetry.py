"""OpenTelemetry tracing for the API and its database calls"""
import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import Settings

logger = logging.getLogger(__name__)

_tracer_provider: TracerProvider | None = None


def setup_tracing(settings: Settings, app: FastAPI, engine: AsyncEngine) -> TracerProvider | None:
    """
    Install a tracer provider and instrument FastAPI, SQLAlchemy and logging.

    Exporters: "console" for development, "otlp" for a collector
    (Jaeger, Tempo, Datadog agent), "none" to trace without exporting.
    """
    global _tracer_provider

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.app_name,
            SERVICE_VERSION: settings.app_version,
            "deployment.environment": settings.environment,
        }
    )
    provider = TracerProvider(resource=resource)

    if settings.telemetry_exporter == "otlp" and settings.telemetry_otlp_endpoint:
        endpoint = settings.telemetry_otlp_endpoint
        exporter = OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
        provider.add_span_processor(BatchSpanProcessor(exporter))
    elif settings.telemetry_exporter == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(
        app, tracer_provider=provider, excluded_urls="/health"
    )
    SQLAlchemyInstrumentor().instrument(
        engine=engine.sync_engine, tracer_provider=provider
    )
    LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=False)

    _tracer_provider = provider
    logger.info(
        "OpenTelemetry initialized: service=%s, exporter=%s",
        settings.app_name,
        settings.telemetry_exporter,
    )
    return provider


def shutdown_tracing() -> None:
    """Flush remaining spans"""
    global _tracer_provider
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None
        logger.info("Telemetry shutdown complete")


def get_tracer(name: str) -> trace.Tracer:
    """No-op tracer until setup_tracing() has run"""
    return trace.get_tracer(name)
