"""Classify decoded webhook events and dispatch them to sync handlers."""

import logging
import re
from dataclasses import dataclass
from typing import Any

from affiliate_bridge.integrations.goaffpro.webhooks import extract_affiliate
from affiliate_bridge.models.event import (
    AffiliateEventKind,
    OrderEventKind,
    Platform,
    WebhookEvent,
)
from affiliate_bridge.observability.context import store_context
from affiliate_bridge.observability.metrics import MetricsRegistry, get_metrics_registry
from affiliate_bridge.sync.affiliates import AffiliateSyncHandler
from affiliate_bridge.sync.orders import OrderSyncHandler

logger = logging.getLogger(__name__)

# GoAffPro event names are not stable ("affiliate_signup", "Affiliate Updated",
# "affiliate.approved", ...), so match loosely on both halves.
_AFFILIATE_PATTERN = re.compile(r"affiliate", re.IGNORECASE)
_UPSERT_PATTERN = re.compile(r"(created|create|signup|updated|update|approved)", re.IGNORECASE)


def classify_order_event(event: str | None) -> OrderEventKind | None:
    """Return the order event kind for events the bridge acts on, else None."""
    if not event:
        return None
    try:
        return OrderEventKind(event)
    except ValueError:
        return None


def classify_affiliate_event(event: str | None) -> AffiliateEventKind:
    """Classify a GoAffPro event name as an affiliate create/update or anything else."""
    if event and _AFFILIATE_PATTERN.search(event) and _UPSERT_PATTERN.search(event):
        return AffiliateEventKind.UPSERT
    return AffiliateEventKind.OTHER


@dataclass
class DispatchResult:
    """Outcome of routing one webhook event."""

    platform: Platform
    kind: str
    handled: bool
    detail: Any = None


class EventRouter:
    """
    Routes webhook events to the order or affiliate sync handler.

    Dispatch is synchronous with the request: the webhook response waits
    for the handler. Events that are not recognized are acknowledged and
    dropped.
    """

    def __init__(
        self,
        order_handler: OrderSyncHandler,
        affiliate_handler: AffiliateSyncHandler,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self.order_handler = order_handler
        self.affiliate_handler = affiliate_handler
        self.metrics = metrics or get_metrics_registry()

    async def dispatch(self, event: WebhookEvent) -> DispatchResult:
        if event.platform == Platform.NUVEMSHOP:
            return await self._dispatch_order(event)
        return await self._dispatch_affiliate(event)

    async def _dispatch_order(self, event: WebhookEvent) -> DispatchResult:
        logger.info(
            f"Nuvemshop webhook {event.kind or '-'} store={event.store_id} id={event.subject_id}"
        )
        kind = classify_order_event(event.kind)
        if kind is None:
            self.metrics.record_webhook(event.platform.value, event.kind, "ignored")
            return DispatchResult(platform=event.platform, kind=event.kind, handled=False)

        with store_context(event.store_id):
            detail = await self.order_handler.handle(event)

        self.metrics.record_webhook(event.platform.value, kind.value, "processed")
        return DispatchResult(platform=event.platform, kind=kind.value, handled=True, detail=detail)

    async def _dispatch_affiliate(self, event: WebhookEvent) -> DispatchResult:
        logger.info(f"GoAffPro webhook {event.kind}")
        kind = classify_affiliate_event(event.kind)
        if kind != AffiliateEventKind.UPSERT or extract_affiliate(event.raw_payload) is None:
            self.metrics.record_webhook(event.platform.value, event.kind, "ignored")
            return DispatchResult(platform=event.platform, kind=event.kind, handled=False)

        try:
            detail = await self.affiliate_handler.handle(event)
        except Exception:
            self.metrics.record_webhook(event.platform.value, event.kind, "failed")
            raise

        self.metrics.record_webhook(event.platform.value, event.kind, "processed")
        return DispatchResult(platform=event.platform, kind=event.kind, handled=True, detail=detail)
