"""Webhook authentication and decoding for GoAffPro events."""

import hmac
import json
import logging
from typing import Any

from affiliate_bridge.models.event import Platform, WebhookEvent

logger = logging.getLogger(__name__)

EVENT_HEADER = "x-goaffpro-event"

# Body keys GoAffPro has been seen to nest the affiliate under
AFFILIATE_KEYS: tuple[str, ...] = ("affiliate", "data", "payload")


def extract_affiliate(body: dict[str, Any]) -> dict[str, Any] | None:
    """Find the affiliate object in a webhook body, if any."""
    for key in AFFILIATE_KEYS:
        value = body.get(key)
        if isinstance(value, dict) and value:
            return value
    return None


class GoAffProWebhookHandler:
    """
    Authenticates and decodes GoAffPro webhook deliveries.

    GoAffPro cannot sign payloads, so the webhook URL carries a shared
    secret in its query string (``?secret=...``). The event name arrives in
    the ``x-goaffpro-event`` header or as ``event``/``type`` in the body.

    Configure in GoAffPro (Settings > Integrations > Webhooks):
    - Affiliate signup -> https://<host>/webhooks/goaffpro?secret=<secret>
    - Affiliate update -> same URL
    """

    def __init__(self, webhook_secret: str) -> None:
        self.webhook_secret = webhook_secret

    def verify_secret(self, provided: str | None) -> bool:
        """Compare the query-string secret in constant time."""
        if not provided or not self.webhook_secret:
            return False
        return hmac.compare_digest(provided.encode("utf-8"), self.webhook_secret.encode("utf-8"))

    def parse_event(
        self,
        body: dict[str, Any] | None,
        header_event: str | None = None,
    ) -> WebhookEvent:
        """Build a WebhookEvent from the decoded body and event header."""
        body = body if isinstance(body, dict) else {}
        event_name = header_event or body.get("event") or body.get("type") or "unknown"
        affiliate = extract_affiliate(body)

        if affiliate:
            logger.info(
                "GoAffPro affiliate payload",
                extra={
                    "affiliate_id": affiliate.get("id"),
                    "affiliate_name": affiliate.get("name"),
                    "affiliate_code": affiliate.get("code"),
                },
            )
        else:
            logger.info(f"GoAffPro webhook without affiliate: {json.dumps(body, default=str)[:1000]}")

        subject_id = affiliate.get("id") if affiliate else None
        account_id = body.get("site_id") or body.get("store_id")
        return WebhookEvent(
            platform=Platform.GOAFFPRO,
            kind=str(event_name),
            store_id=str(account_id) if account_id is not None else None,
            subject_id=str(subject_id) if subject_id is not None else None,
            raw_payload=body,
        )
