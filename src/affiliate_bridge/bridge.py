"""Wires storage, platform clients and sync handlers into one bridge."""

import logging
from dataclasses import dataclass
from datetime import timedelta

import redis.asyncio as redis

from affiliate_bridge.config import Settings, get_settings
from affiliate_bridge.exceptions import BridgeNotReadyError
from affiliate_bridge.integrations.goaffpro import GoAffProClient, GoAffProWebhookHandler
from affiliate_bridge.integrations.nuvemshop import (
    NuvemshopConnector,
    NuvemshopOAuth,
    NuvemshopWebhookHandler,
)
from affiliate_bridge.observability.metrics import get_metrics_registry
from affiliate_bridge.storage import (
    AttributionStore,
    InMemoryAttributionStore,
    InMemoryTokenRegistry,
    RedisAttributionStore,
    RedisTokenRegistry,
    TokenRegistry,
)
from affiliate_bridge.sync.affiliates import (
    AffiliateSyncHandler,
    FirstConnectedStoreSelector,
    StoreSelector,
)
from affiliate_bridge.sync.orders import OrderSyncHandler
from affiliate_bridge.sync.router import EventRouter

logger = logging.getLogger(__name__)


@dataclass
class BridgeComponents:
    """Container for bridge components."""

    token_registry: TokenRegistry
    attribution_store: AttributionStore
    nuvemshop: NuvemshopConnector
    goaffpro: GoAffProClient
    nuvemshop_webhooks: NuvemshopWebhookHandler
    goaffpro_webhooks: GoAffProWebhookHandler
    oauth: NuvemshopOAuth
    store_selector: StoreSelector
    router: EventRouter


class Bridge:
    """
    Nuvemshop <-> GoAffPro bridge.

    Owns the storage backends, the two platform clients and the webhook
    pipeline:
    1. Signature / shared-secret verification
    2. Payload decoding into a WebhookEvent
    3. Event routing to the order or affiliate sync handler
    """

    def __init__(
        self,
        settings: Settings | None = None,
        components: BridgeComponents | None = None,
    ) -> None:
        """
        Initialize the bridge.

        Args:
            settings: Configuration settings. Uses defaults if not provided.
            components: Pre-configured components (for testing).
        """
        self.settings = settings or get_settings()
        self._components = components
        self._redis: redis.Redis | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """Create storage backends and platform clients."""
        if self._initialized:
            return

        if self._components is None:
            token_registry, attribution_store = await self._create_storage()
            self._components = build_components(self.settings, token_registry, attribution_store)

        self._initialized = True

    async def _create_storage(self) -> tuple[TokenRegistry, AttributionStore]:
        ttl = timedelta(hours=self.settings.attribution_ttl_hours)

        if self.settings.store_backend == "redis":
            self._redis = redis.from_url(self.settings.redis_url, decode_responses=True)
            await self._redis.ping()
            logger.info("Storage: redis backend")
            return (
                RedisTokenRegistry(self._redis),
                RedisAttributionStore(self._redis, ttl=ttl),
            )

        logger.info("Storage: in-memory backend (store tokens are lost on restart)")
        return (
            InMemoryTokenRegistry(),
            InMemoryAttributionStore(ttl=ttl, max_entries=self.settings.attribution_max_entries),
        )

    async def shutdown(self) -> None:
        """Close HTTP clients and the Redis connection."""
        if self._components:
            await self._components.nuvemshop.close()
            await self._components.goaffpro.close()
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
        self._initialized = False

    @property
    def components(self) -> BridgeComponents:
        """Get bridge components."""
        if not self._components:
            raise BridgeNotReadyError()
        return self._components


def build_components(
    settings: Settings,
    token_registry: TokenRegistry,
    attribution_store: AttributionStore,
) -> BridgeComponents:
    """Assemble clients and handlers around the given storage backends."""
    metrics = get_metrics_registry()

    nuvemshop = NuvemshopConnector(
        token_lookup=token_registry.get,
        api_base=settings.ns_api_base,
        api_version=settings.ns_api_version,
        user_agent=settings.ns_user_agent,
    )
    goaffpro = GoAffProClient(
        access_token=settings.goaffpro_access_token,
        api_base=settings.goaffpro_api_base,
    )
    store_selector = FirstConnectedStoreSelector(token_registry)

    router = EventRouter(
        order_handler=OrderSyncHandler(
            commerce=nuvemshop,
            affiliates=goaffpro,
            attribution_store=attribution_store,
            metrics=metrics,
        ),
        affiliate_handler=AffiliateSyncHandler(
            commerce=nuvemshop,
            affiliates=goaffpro,
            store_selector=store_selector,
            coupon_percent=settings.default_coupon_percent,
            metrics=metrics,
        ),
        metrics=metrics,
    )

    return BridgeComponents(
        token_registry=token_registry,
        attribution_store=attribution_store,
        nuvemshop=nuvemshop,
        goaffpro=goaffpro,
        nuvemshop_webhooks=NuvemshopWebhookHandler(webhook_secret=settings.ns_client_secret),
        goaffpro_webhooks=GoAffProWebhookHandler(webhook_secret=settings.goaffpro_webhook_secret),
        oauth=NuvemshopOAuth(
            client_id=settings.ns_client_id,
            client_secret=settings.ns_client_secret,
            token_url=settings.ns_token_url,
        ),
        store_selector=store_selector,
        router=router,
    )
