"""Webhook-driven synchronization between Nuvemshop and GoAffPro."""

from affiliate_bridge.sync.affiliates import (
    AffiliateSyncHandler,
    AffiliateSyncResult,
    FirstConnectedStoreSelector,
    StoreSelector,
    create_percentage_coupon,
)
from affiliate_bridge.sync.attribution import capture_attribution
from affiliate_bridge.sync.coupons import suggest_coupon_code
from affiliate_bridge.sync.custom_fields import build_field_values, ensure_custom_fields
from affiliate_bridge.sync.install import run_install_setup
from affiliate_bridge.sync.orders import OrderSyncHandler, OrderSyncResult
from affiliate_bridge.sync.router import (
    DispatchResult,
    EventRouter,
    classify_affiliate_event,
    classify_order_event,
)

__all__ = [
    "AffiliateSyncHandler",
    "AffiliateSyncResult",
    "DispatchResult",
    "EventRouter",
    "FirstConnectedStoreSelector",
    "OrderSyncHandler",
    "OrderSyncResult",
    "StoreSelector",
    "build_field_values",
    "capture_attribution",
    "classify_affiliate_event",
    "classify_order_event",
    "create_percentage_coupon",
    "ensure_custom_fields",
    "run_install_setup",
    "suggest_coupon_code",
]
