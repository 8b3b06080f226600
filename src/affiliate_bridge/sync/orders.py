"""Order sync: join paid orders with captured attribution and forward them."""

import logging
from dataclasses import dataclass, field

from affiliate_bridge.exceptions import BridgeError, RemoteCallError
from affiliate_bridge.integrations.base import (
    AffiliatePlatform,
    CommercePlatform,
    OrderPush,
    OrderRecord,
)
from affiliate_bridge.models.event import WebhookEvent
from affiliate_bridge.observability.metrics import MetricsRegistry, get_metrics_registry
from affiliate_bridge.observability.tracing import traced
from affiliate_bridge.storage.base import AttributionStore
from affiliate_bridge.sync.custom_fields import build_field_values, ensure_custom_fields

logger = logging.getLogger(__name__)


@dataclass
class OrderSyncResult:
    """What an order sync attempt managed to do."""

    order_id: str | None
    store_id: str | None
    fetched: bool = False
    attribution_found: bool = False
    fields_written: int = 0
    forwarded: bool = False
    errors: list[str] = field(default_factory=list)


def log_remote_failure(operation: str, error: Exception, metrics: MetricsRegistry) -> None:
    """Log a swallowed failure with the remote response body when there is one."""
    metrics.record_remote_failure(operation)
    if isinstance(error, RemoteCallError):
        logger.error(
            f"{operation}: {error.message}",
            extra={"remote_status": error.remote_status, "response_body": error.response_body},
        )
    elif isinstance(error, BridgeError):
        logger.error(f"{operation} failed: {error.message}")
    else:
        logger.exception(f"{operation} failed unexpectedly: {error}")


class OrderSyncHandler:
    """
    Handles qualifying Nuvemshop order events.

    For each event:
    1. Fetch the authoritative order (the webhook body only carries IDs).
    2. If the customer email has captured attribution, ensure the store's
       custom fields exist and write the UTM tags and coupon onto the order.
    3. Forward the order to GoAffPro whether or not attribution was found.

    Every remote call is guarded on its own. Failures are logged and the
    handler returns normally, so Nuvemshop always gets a 200 once the
    signature has been verified and never retries because of our errors.
    """

    def __init__(
        self,
        commerce: CommercePlatform,
        affiliates: AffiliatePlatform,
        attribution_store: AttributionStore,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self.commerce = commerce
        self.affiliates = affiliates
        self.attribution_store = attribution_store
        self.metrics = metrics or get_metrics_registry()

    @traced(name="order_sync.handle")
    async def handle(self, event: WebhookEvent) -> OrderSyncResult:
        store_id = event.store_id
        order_id = event.subject_id
        result = OrderSyncResult(order_id=order_id, store_id=store_id)

        if not store_id or not order_id:
            logger.warning(f"Order event {event.kind} without store_id/id; nothing to sync")
            result.errors.append("missing store_id or id")
            return result

        try:
            order = await self.commerce.get_order(store_id, order_id)
        except Exception as e:
            log_remote_failure("get_order", e, self.metrics)
            result.errors.append("get_order")
            return result

        if order is None:
            logger.warning(f"Order {order_id} not found in store {store_id}; forwarding IDs only")
            order = OrderRecord(order_id=order_id)
        else:
            result.fetched = True
        result.order_id = order.order_id or order_id

        await self._attach_attribution(store_id, order, result)
        await self._forward(store_id, order, result)
        return result

    async def _attach_attribution(
        self, store_id: str, order: OrderRecord, result: OrderSyncResult
    ) -> None:
        """Write stored attribution and the coupon onto the order as custom fields."""
        if not order.customer_email:
            logger.info(f"Order {order.order_id} has no customer email; skipping attribution")
            return

        try:
            attribution = await self.attribution_store.get(order.customer_email)
        except Exception as e:
            log_remote_failure("attribution_lookup", e, self.metrics)
            result.errors.append("attribution_lookup")
            return

        if attribution is None:
            logger.info(f"No attribution captured for order {order.order_id}")
            return
        result.attribution_found = True

        try:
            field_ids = await ensure_custom_fields(self.commerce, store_id)
        except Exception as e:
            log_remote_failure("ensure_custom_fields", e, self.metrics)
            result.errors.append("ensure_custom_fields")
            return

        values = build_field_values(field_ids, attribution, order.coupon_code)
        if not values:
            return

        try:
            await self.commerce.set_order_custom_field_values(store_id, order.order_id, values)
        except Exception as e:
            log_remote_failure("set_order_custom_field_values", e, self.metrics)
            result.errors.append("set_order_custom_field_values")
            return

        result.fields_written = len(values)
        logger.info(f"Attribution written to order {order.order_id}: {len(values)} fields")

    async def _forward(self, store_id: str, order: OrderRecord, result: OrderSyncResult) -> None:
        """Push the order to GoAffPro; missing coupon or email go as null."""
        push = OrderPush(
            order_id=order.order_id or str(result.order_id),
            store_id=store_id,
            coupon=order.coupon_code,
            email=order.customer_email,
            total=order.total,
            currency=order.currency,
        )
        try:
            result.forwarded = await self.affiliates.send_order(push)
        except Exception as e:
            log_remote_failure("goaffpro_send_order", e, self.metrics)
            result.errors.append("goaffpro_send_order")
