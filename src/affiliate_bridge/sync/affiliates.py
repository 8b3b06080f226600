"""Affiliate sync: create a store coupon for each new or updated affiliate."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from affiliate_bridge.exceptions import MissingPrerequisiteError
from affiliate_bridge.integrations.base import (
    AffiliatePlatform,
    AffiliateRecord,
    CommercePlatform,
    CouponSpec,
)
from affiliate_bridge.integrations.goaffpro.webhooks import extract_affiliate
from affiliate_bridge.models.event import WebhookEvent
from affiliate_bridge.observability.context import store_context
from affiliate_bridge.observability.metrics import MetricsRegistry, get_metrics_registry
from affiliate_bridge.observability.tracing import traced
from affiliate_bridge.storage.base import TokenRegistry
from affiliate_bridge.sync.coupons import suggest_coupon_code
from affiliate_bridge.sync.orders import log_remote_failure

logger = logging.getLogger(__name__)


class StoreSelector(ABC):
    """Chooses which connected store an affiliate's coupon is created in."""

    @abstractmethod
    async def select(self, affiliate: AffiliateRecord | None = None) -> str | None:
        ...


class FirstConnectedStoreSelector(StoreSelector):
    """
    Picks the earliest-connected store that holds a credential.

    Stand-in for real routing from a GoAffPro account to a specific store;
    with a single connected store it is exact.
    """

    def __init__(self, token_registry: TokenRegistry) -> None:
        self.token_registry = token_registry

    async def select(self, affiliate: AffiliateRecord | None = None) -> str | None:
        for store_id in await self.token_registry.list_store_ids():
            if await self.token_registry.get(store_id):
                return store_id
        return None


@dataclass
class AffiliateSyncResult:
    """What an affiliate sync attempt did."""

    affiliate_id: str | None
    coupon_code: str | None = None
    store_id: str | None = None
    coupon_created: bool = False
    coupon_assigned: bool = False


async def create_percentage_coupon(
    commerce: CommercePlatform,
    store_id: str,
    code: str,
    percent: float,
) -> CouponSpec:
    """Create an unlimited-use, non-stacking percentage coupon in a store."""
    coupon = CouponSpec(
        code=code,
        discount_type="percentage",
        discount_value=float(percent),
        usage_limit=0,
        stackable=False,
    )
    await commerce.create_coupon(store_id, coupon)
    logger.info(f"Coupon created: {code} ({percent:.2f}%) in store {store_id}")
    return coupon


class AffiliateSyncHandler:
    """
    Handles GoAffPro affiliate created/updated events.

    Derives a coupon code from the affiliate, creates the coupon in the
    selected store, then registers it against the affiliate in GoAffPro.
    The two writes are independent: a failed registration leaves the coupon
    in place and is only logged, since it can be redone from GoAffPro.
    Coupon creation failures propagate to the caller.
    """

    def __init__(
        self,
        commerce: CommercePlatform,
        affiliates: AffiliatePlatform,
        store_selector: StoreSelector,
        coupon_percent: float = 10.0,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self.commerce = commerce
        self.affiliates = affiliates
        self.store_selector = store_selector
        self.coupon_percent = coupon_percent
        self.metrics = metrics or get_metrics_registry()

    @traced(name="affiliate_sync.handle")
    async def handle(self, event: WebhookEvent) -> AffiliateSyncResult:
        """
        Create and register the affiliate's coupon.

        Raises:
            MissingPrerequisiteError: If no store is connected.
            RemoteCallError: If the store rejects the coupon.
        """
        data = extract_affiliate(event.raw_payload)
        if data is None:
            logger.info(f"GoAffPro event {event.kind} carries no affiliate; nothing to sync")
            return AffiliateSyncResult(affiliate_id=None)

        affiliate = AffiliateRecord.from_payload(data)
        result = AffiliateSyncResult(
            affiliate_id=affiliate.affiliate_id,
            coupon_code=suggest_coupon_code(affiliate),
        )

        store_id = await self.store_selector.select(affiliate)
        if not store_id:
            raise MissingPrerequisiteError()
        result.store_id = store_id

        with store_context(store_id):
            await create_percentage_coupon(
                self.commerce, store_id, result.coupon_code, self.coupon_percent
            )
            result.coupon_created = True
            self.metrics.record_coupon_created(store_id)

            if not affiliate.affiliate_id:
                logger.warning(f"Affiliate without id; coupon {result.coupon_code} not assigned")
                return result

            try:
                result.coupon_assigned = await self.affiliates.assign_coupon(
                    affiliate.affiliate_id, result.coupon_code
                )
            except Exception as e:
                log_remote_failure("goaffpro_assign_coupon", e, self.metrics)

        return result
