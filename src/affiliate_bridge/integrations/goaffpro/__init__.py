"""GoAffPro affiliate platform integration."""

from affiliate_bridge.integrations.goaffpro.client import GoAffProClient
from affiliate_bridge.integrations.goaffpro.webhooks import (
    EVENT_HEADER,
    GoAffProWebhookHandler,
    extract_affiliate,
)

__all__ = [
    "EVENT_HEADER",
    "GoAffProClient",
    "GoAffProWebhookHandler",
    "extract_affiliate",
]
