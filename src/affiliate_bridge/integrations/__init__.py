"""Platform integrations for Nuvemshop and GoAffPro."""

from affiliate_bridge.integrations.base import (
    AffiliatePlatform,
    AffiliateRecord,
    CommercePlatform,
    CouponSpec,
    CustomFieldDefinition,
    CustomFieldValue,
    OrderPush,
    OrderRecord,
)
from affiliate_bridge.integrations.goaffpro import GoAffProClient, GoAffProWebhookHandler
from affiliate_bridge.integrations.nuvemshop import (
    NuvemshopConnector,
    NuvemshopOAuth,
    NuvemshopWebhookHandler,
)

__all__ = [
    # Base
    "AffiliatePlatform",
    "AffiliateRecord",
    "CommercePlatform",
    "CouponSpec",
    "CustomFieldDefinition",
    "CustomFieldValue",
    "OrderPush",
    "OrderRecord",
    # Nuvemshop
    "NuvemshopConnector",
    "NuvemshopOAuth",
    "NuvemshopWebhookHandler",
    # GoAffPro
    "GoAffProClient",
    "GoAffProWebhookHandler",
]
