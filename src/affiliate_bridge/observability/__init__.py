"""Observability module for tracing, metrics, and logging."""

from affiliate_bridge.observability.context import get_current_store_id, store_context
from affiliate_bridge.observability.logging import configure_logging
from affiliate_bridge.observability.metrics import MetricsRegistry, get_metrics_registry
from affiliate_bridge.observability.telemetry import (
    TelemetryConfig,
    init_telemetry,
    shutdown_telemetry,
)
from affiliate_bridge.observability.tracing import get_tracer, traced

__all__ = [
    # Telemetry
    "TelemetryConfig",
    "init_telemetry",
    "shutdown_telemetry",
    # Tracing
    "get_tracer",
    "traced",
    # Metrics
    "MetricsRegistry",
    "get_metrics_registry",
    # Logging
    "configure_logging",
    "get_current_store_id",
    "store_context",
]
