"""
unleash_proxy.observability.tracing

OpenTelemetry tracing and request metrics configuration.

Responsibilities:
- Install SDK tracer and meter providers with OTLP gRPC exporters when an endpoint is configured.
- Instrument the FastAPI app so every request gets a server span that continues the caller's
  trace (W3C traceparent + baggage) and is counted in the OTLP request metrics.
- Hand out the service tracer (the API's no-op tracer when tracing is disabled).
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from unleash_proxy.observability.logging import get_logger
from unleash_proxy.settings import Settings

log = get_logger(__name__)

TRACER_NAME = "unleash_proxy"

METRIC_EXPORT_INTERVAL_MS = 30_000

# Health checks and Prometheus scrapes are not traced.
EXCLUDED_URLS = "/isAlive,/isReady,/metrics"


@dataclass(frozen=True)
class Telemetry:
    tracer_provider: TracerProvider
    meter_provider: MeterProvider

    def shutdown(self) -> None:
        for provider in (self.tracer_provider, self.meter_provider):
            try:
                provider.shutdown()
            except Exception:
                log.exception("telemetry_shutdown_failed", provider=type(provider).__name__)


def configure_telemetry(settings: Settings) -> Telemetry | None:
    if not settings.otel_exporter_otlp_endpoint:
        log.info("telemetry_disabled")
        return None

    resource = Resource.create(
        {
            "service.name": settings.service_name,
            "service.version": settings.otel_service_version,
            "deployment.environment.name": settings.deployment_environment,
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint))
    )
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=settings.otel_exporter_otlp_endpoint),
        export_interval_millis=METRIC_EXPORT_INTERVAL_MS,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)

    log.info(
        "telemetry_enabled",
        endpoint=settings.otel_exporter_otlp_endpoint,
        service_name=settings.service_name,
        environment=settings.deployment_environment,
    )
    return Telemetry(tracer_provider=tracer_provider, meter_provider=meter_provider)


def instrument_app(
    app: FastAPI,
    *,
    tracer_provider: trace.TracerProvider | None = None,
    meter_provider: metrics.MeterProvider | None = None,
) -> None:
    """
    Wrap the app in the OpenTelemetry ASGI middleware.
    Must run before the first request builds the middleware stack.
    """

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
        excluded_urls=EXCLUDED_URLS,
    )


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


# --- Module Notes -----------------------------------------------------------
# The global propagator defaults to tracecontext + baggage, so incoming `traceparent` headers
# parent the server span. The `Telemetry` bundle is shut down by the app lifespan so batched
# spans and metrics are flushed before exit.
