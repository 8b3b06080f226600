"""Webhook receiver endpoints for Nuvemshop and GoAffPro."""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import JSONResponse

from affiliate_bridge.api.deps import get_bridge
from affiliate_bridge.bridge import Bridge
from affiliate_bridge.exceptions import AuthenticationError, BridgeError, MalformedInputError
from affiliate_bridge.integrations.goaffpro.webhooks import EVENT_HEADER
from affiliate_bridge.integrations.nuvemshop.webhooks import SIGNATURE_HEADER
from affiliate_bridge.sync.affiliates import AffiliateSyncResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post(
    "/nuvemshop",
    summary="Receive Nuvemshop webhooks",
    description="Signed order events (order/paid, order/created, order/updated).",
    response_model=dict[str, Any],
)
async def receive_nuvemshop_webhook(
    request: Request,
    signature: str | None = Header(
        default=None,
        alias=SIGNATURE_HEADER,
        description="Hex HMAC-SHA256 of the raw body keyed by the app secret",
    ),
    bridge: Bridge = Depends(get_bridge),
) -> dict[str, Any]:
    """
    Receive and process a Nuvemshop webhook.

    Returns 401 on a bad signature and 400 on a malformed body. Once both
    checks pass the response is always 200, even if syncing the order
    failed, so Nuvemshop does not retry on our internal errors.
    """
    components = bridge.components

    # Signature is computed over the raw bytes, before any JSON parsing
    body = await request.body()
    if not components.nuvemshop_webhooks.verify_signature(body, signature):
        logger.warning("Invalid Nuvemshop webhook signature")
        raise AuthenticationError("invalid signature")

    event = components.nuvemshop_webhooks.parse_event(body)

    try:
        await components.router.dispatch(event)
    except Exception as e:
        logger.exception(f"Error processing Nuvemshop webhook {event.kind}: {e}")

    return {"ok": True}


@router.post(
    "/goaffpro",
    summary="Receive GoAffPro webhooks",
    description="Affiliate signup/update events; creates and assigns the affiliate coupon.",
    response_model=dict[str, Any],
)
async def receive_goaffpro_webhook(
    request: Request,
    secret: str | None = Query(default=None, description="Shared webhook secret"),
    event_header: str | None = Header(default=None, alias=EVENT_HEADER),
    bridge: Bridge = Depends(get_bridge),
) -> Any:
    """
    Receive and process a GoAffPro webhook.

    Returns 401 when the shared secret does not match and 500 with
    ``{"ok": false, "error": ...}`` when the coupon could not be created.
    """
    components = bridge.components

    if not components.goaffpro_webhooks.verify_secret(secret):
        raise AuthenticationError("unauthorized")

    raw = await request.body()
    if raw.strip():
        try:
            body = json.loads(raw)
        except ValueError as e:
            raise MalformedInputError("invalid json") from e
    else:
        body = {}

    event = components.goaffpro_webhooks.parse_event(body, event_header)

    try:
        result = await components.router.dispatch(event)
    except BridgeError as e:
        logger.error(f"GoAffPro coupon error: {e.message}")
        return JSONResponse(status_code=500, content={"ok": False, "error": e.message})
    except Exception as e:
        logger.exception(f"GoAffPro coupon error: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})

    if result.handled and isinstance(result.detail, AffiliateSyncResult) and result.detail.coupon_created:
        return {"ok": True, "coupon": result.detail.coupon_code}
    return {"ok": True}
