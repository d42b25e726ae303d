"""OpenTelemetry configuration helpers."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from sqlalchemy import Engine

from app.config import AppSettings

logger = logging.getLogger(__name__)

_TRACER_PROVIDER: TracerProvider | None = None


def _build_resource(settings: AppSettings) -> Resource:
    attributes: dict[str, Any] = {
        ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
        ResourceAttributes.SERVICE_NAMESPACE: "asset-manager",
    }
    return Resource.create(attributes)


def _build_exporter_options(settings: AppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def setup_telemetry(app: FastAPI, settings: AppSettings) -> bool:
    """Configure OTLP tracing and instrument FastAPI, httpx and logging.

    Returns ``True`` when instrumentation is active. Disabled by default.
    """

    global _TRACER_PROVIDER  # noqa: PLW0603 - single initialisation guard

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    if _TRACER_PROVIDER is None:
        sampler = ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio))
        provider = TracerProvider(resource=_build_resource(settings), sampler=sampler)
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**_build_exporter_options(settings))))
        trace.set_tracer_provider(provider)
        # Outbound calls to the Bank of Taiwan get spans and propagate context
        HTTPXClientInstrumentor().instrument(tracer_provider=provider)
        LoggingInstrumentor().instrument(set_logging_format=False)
        _TRACER_PROVIDER = provider

    FastAPIInstrumentor.instrument_app(app, tracer_provider=_TRACER_PROVIDER)
    logger.info("Telemetry initialised and instrumentation enabled")
    return True


def instrument_engine(engine: Engine) -> None:
    """Trace SQL statements on ``engine`` once telemetry is active."""

    if _TRACER_PROVIDER is None:
        return
    SQLAlchemyInstrumentor().instrument(engine=engine, tracer_provider=_TRACER_PROVIDER)


__all__ = ["instrument_engine", "setup_telemetry"]
