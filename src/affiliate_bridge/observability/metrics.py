"""Webhook and remote-call metrics."""

import logging

from opentelemetry import metrics

logger = logging.getLogger(__name__)

_metrics_registry: "MetricsRegistry | None" = None


class MetricsRegistry:
    """
    Registry for OpenTelemetry metrics.

    Instruments:
    - webhooks received, by platform, event kind and outcome
    - remote call failures, by operation
    - coupons created for affiliates
    """

    def __init__(self, meter_name: str = "affiliate_bridge") -> None:
        meter = metrics.get_meter(meter_name)

        self.webhooks_total = meter.create_counter(
            name="bridge_webhooks_total",
            description="Inbound webhooks by platform, kind and outcome",
            unit="1",
        )
        self.remote_failures_total = meter.create_counter(
            name="bridge_remote_call_failures_total",
            description="Failed calls to Nuvemshop or GoAffPro",
            unit="1",
        )
        self.coupons_created_total = meter.create_counter(
            name="bridge_coupons_created_total",
            description="Affiliate coupons created in a store",
            unit="1",
        )

    def record_webhook(self, platform: str, kind: str, outcome: str) -> None:
        """
        Record an inbound webhook.

        Args:
            platform: nuvemshop or goaffpro.
            kind: Event identifier as received.
            outcome: processed, ignored, rejected or failed.
        """
        self.webhooks_total.add(1, {"platform": platform, "kind": kind, "outcome": outcome})

    def record_remote_failure(self, operation: str) -> None:
        self.remote_failures_total.add(1, {"operation": operation})

    def record_coupon_created(self, store_id: str) -> None:
        self.coupons_created_total.add(1, {"store_id": store_id})


def get_metrics_registry() -> MetricsRegistry:
    """Get the global metrics registry, creating it on first use."""
    global _metrics_registry
    if _metrics_registry is None:
        _metrics_registry = MetricsRegistry()
    return _metrics_registry
