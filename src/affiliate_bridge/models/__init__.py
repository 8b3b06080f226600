"""Data models for the affiliate bridge."""

from affiliate_bridge.models.attribution import (
    ATTRIBUTION_TAGS,
    AttributionCapture,
    AttributionRecord,
    normalize_customer_key,
)
from affiliate_bridge.models.event import (
    AffiliateEventKind,
    OrderEventKind,
    Platform,
    WebhookEvent,
)

__all__ = [
    "ATTRIBUTION_TAGS",
    "AffiliateEventKind",
    "AttributionCapture",
    "AttributionRecord",
    "OrderEventKind",
    "Platform",
    "WebhookEvent",
    "normalize_customer_key",
]
