"""Health and attribution capture routes."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from affiliate_bridge.api.deps import get_bridge
from affiliate_bridge.bridge import Bridge
from affiliate_bridge.config import get_settings
from affiliate_bridge.models.attribution import AttributionCapture
from affiliate_bridge.sync.attribution import capture_attribution

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", tags=["health"])
async def health() -> dict[str, Any]:
    """Liveness check."""
    return {"ok": True, "version": get_settings().api_version}


@router.post(
    "/session/utm",
    tags=["attribution"],
    summary="Capture shopper attribution",
    description="Called by the storefront script with the checkout email and UTM tags.",
)
async def capture_session_utm(
    capture: AttributionCapture | None = Body(default=None),
    bridge: Bridge = Depends(get_bridge),
) -> dict[str, Any]:
    """Store the posted tags under the lowercased email; 400 if email is missing."""
    await capture_attribution(bridge.components.attribution_store, capture or AttributionCapture())
    return {"ok": True}
