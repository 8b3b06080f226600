"""OpenTelemetry SDK initialization."""

import logging
from dataclasses import dataclass

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

_telemetry_initialized = False


@dataclass
class TelemetryConfig:
    """Configuration for OpenTelemetry."""

    service_name: str = "affiliate-bridge"
    service_version: str = "0.1.0"
    environment: str = "development"

    otlp_endpoint: str = "http://localhost:4317"
    otlp_insecure: bool = True

    enable_tracing: bool = False
    enable_metrics: bool = True


def init_telemetry(config: TelemetryConfig | None = None) -> bool:
    """
    Initialize OpenTelemetry SDK.

    Sets up:
    - Tracer provider with OTLP exporter (when tracing is enabled)
    - Meter provider with Prometheus reader (when metrics are enabled)
    - httpx client instrumentation so outbound platform calls are traced

    Returns:
        True if initialization was successful, False otherwise.
    """
    global _telemetry_initialized

    if _telemetry_initialized:
        logger.debug("Telemetry already initialized")
        return True

    if config is None:
        config = TelemetryConfig()

    resource = Resource.create({
        "service.name": config.service_name,
        "service.version": config.service_version,
        "deployment.environment": config.environment,
    })

    try:
        if config.enable_tracing:
            tracer_provider = TracerProvider(resource=resource)
            tracer_provider.add_span_processor(
                BatchSpanProcessor(
                    OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=config.otlp_insecure)
                )
            )
            trace.set_tracer_provider(tracer_provider)
            HTTPXClientInstrumentor().instrument()
            logger.info(f"Tracing initialized with endpoint: {config.otlp_endpoint}")

        if config.enable_metrics:
            metrics.set_meter_provider(
                MeterProvider(resource=resource, metric_readers=[PrometheusMetricReader()])
            )
            logger.info("Metrics initialized with Prometheus exporter")
    except Exception as e:
        logger.error(f"Failed to initialize OpenTelemetry: {e}")
        return False

    _telemetry_initialized = True
    return True


def shutdown_telemetry() -> None:
    """Shutdown OpenTelemetry SDK gracefully."""
    global _telemetry_initialized

    if not _telemetry_initialized:
        return

    tracer_provider = trace.get_tracer_provider()
    if isinstance(tracer_provider, TracerProvider):
        tracer_provider.shutdown()
    meter_provider = metrics.get_meter_provider()
    if isinstance(meter_provider, MeterProvider):
        meter_provider.shutdown()
    logger.info("Telemetry shutdown complete")

    _telemetry_initialized = False
