"""Webhook verification and decoding for Nuvemshop events."""

import hashlib
import hmac
import json
import logging

from affiliate_bridge.exceptions import MalformedInputError
from affiliate_bridge.models.event import Platform, WebhookEvent

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-linkedstore-hmac-sha256"


def compute_signature(payload: bytes, secret: str) -> str:
    """Hex-encoded HMAC-SHA256 of the raw body keyed by the app secret."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """
    Verify a Nuvemshop webhook signature.

    The digest is computed over the body exactly as received. Lengths are
    compared first so the constant-time comparison only ever sees equal-length
    buffers; any error while hashing or comparing counts as a failed check.

    Args:
        payload: Raw request body bytes.
        signature: Value of the x-linkedstore-hmac-sha256 header.
        secret: Nuvemshop app client secret.

    Returns:
        True if signature is valid, False otherwise.
    """
    try:
        if not signature or not secret:
            return False
        expected = compute_signature(payload, secret)
        provided = signature.encode("utf-8")
        if len(provided) != len(expected):
            return False
        return hmac.compare_digest(provided, expected.encode("utf-8"))
    except Exception as e:
        logger.warning(f"Nuvemshop signature check failed: {e}")
        return False


class NuvemshopWebhookHandler:
    """
    Verifies and decodes Nuvemshop webhook deliveries.

    Nuvemshop posts a small JSON body such as
    ``{"store_id": 1, "event": "order/paid", "id": 42}`` signed with the app
    secret in the ``x-linkedstore-hmac-sha256`` header. Deciding what to do
    with the event is left to the event router.
    """

    def __init__(self, webhook_secret: str) -> None:
        """
        Initialize webhook handler.

        Args:
            webhook_secret: Nuvemshop app client secret.
        """
        self.webhook_secret = webhook_secret

    def verify_signature(self, payload: bytes, signature: str | None) -> bool:
        return verify_signature(payload, signature, self.webhook_secret)

    def parse_event(self, payload: bytes) -> WebhookEvent:
        """
        Decode a verified body into a WebhookEvent.

        Raises:
            MalformedInputError: If the body is not a JSON object.
        """
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedInputError("invalid json") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MalformedInputError("invalid json", detail="expected a JSON object")

        store_id = data.get("store_id")
        subject_id = data.get("id")
        return WebhookEvent(
            platform=Platform.NUVEMSHOP,
            kind=str(data.get("event") or ""),
            store_id=str(store_id) if store_id is not None else None,
            subject_id=str(subject_id) if subject_id is not None else None,
            raw_payload=data,
        )
