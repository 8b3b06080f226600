"""Nuvemshop (Tiendanube) integration."""

from affiliate_bridge.integrations.nuvemshop.auth import NuvemshopOAuth, OAuthGrant
from affiliate_bridge.integrations.nuvemshop.connector import NuvemshopConnector
from affiliate_bridge.integrations.nuvemshop.mapping import (
    COUPON_FIELD,
    REQUIRED_CUSTOM_FIELDS,
    TAG_FIELD_MAP,
    extract_coupon_code,
    parse_order,
)
from affiliate_bridge.integrations.nuvemshop.webhooks import (
    SIGNATURE_HEADER,
    NuvemshopWebhookHandler,
    compute_signature,
    verify_signature,
)

__all__ = [
    "COUPON_FIELD",
    "NuvemshopConnector",
    "NuvemshopOAuth",
    "NuvemshopWebhookHandler",
    "OAuthGrant",
    "REQUIRED_CUSTOM_FIELDS",
    "SIGNATURE_HEADER",
    "TAG_FIELD_MAP",
    "compute_signature",
    "extract_coupon_code",
    "parse_order",
    "verify_signature",
]
