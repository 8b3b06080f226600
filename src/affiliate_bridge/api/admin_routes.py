"""Admin endpoints for manual checks and coupon creation."""

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from affiliate_bridge.api.deps import get_bridge
from affiliate_bridge.bridge import Bridge
from affiliate_bridge.config import get_settings
from affiliate_bridge.exceptions import MissingPrerequisiteError
from affiliate_bridge.sync.affiliates import create_percentage_coupon

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class CouponCreateRequest(BaseModel):
    """Payload for creating a coupon by hand."""

    code: str = "TESTE10"
    percent: float = Field(default=10.0, gt=0, le=100)


async def verify_admin_key(request: Request) -> None:
    """Require Authorization: Bearer <admin_api_key>. Raise 401/403 if missing or invalid."""
    settings = get_settings()
    if not settings.admin_api_key:
        raise HTTPException(status_code=501, detail="Admin API not configured")
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    key = auth[7:].strip()
    if not hmac.compare_digest(key.encode("utf-8"), settings.admin_api_key.encode("utf-8")):
        raise HTTPException(status_code=403, detail="Invalid admin key")


async def _require_store(bridge: Bridge) -> str:
    store_id = await bridge.components.store_selector.select()
    if not store_id:
        raise MissingPrerequisiteError()
    return store_id


async def _run_admin_test(bridge: Bridge) -> dict[str, Any]:
    components = bridge.components
    store_id = await components.store_selector.select()
    store_ok = await components.nuvemshop.health_check(store_id) if store_id else None
    goaffpro_ok = await components.goaffpro.ping() if components.goaffpro.configured else None
    return {"ok": True, "store_id": store_id, "store": store_ok, "goaffpro": goaffpro_ok}


@router.get("/test", dependencies=[Depends(verify_admin_key)])
async def admin_test(bridge: Bridge = Depends(get_bridge)):
    """Check the first connected store's token and the GoAffPro token."""
    return await _run_admin_test(bridge)


@router.post("/test", dependencies=[Depends(verify_admin_key)])
async def admin_test_post(bridge: Bridge = Depends(get_bridge)):
    """Same as GET /admin/test."""
    return await _run_admin_test(bridge)


@router.post("/create-coupon", dependencies=[Depends(verify_admin_key)])
async def create_coupon(
    body: CouponCreateRequest | None = None,
    bridge: Bridge = Depends(get_bridge),
):
    """Create a percentage coupon in the first connected store (500 if none)."""
    body = body or CouponCreateRequest()
    store_id = await _require_store(bridge)
    code = body.code.strip().upper()
    await create_percentage_coupon(bridge.components.nuvemshop, store_id, code, body.percent)
    return {"ok": True, "code": code, "store_id": store_id}


@router.get("/products", dependencies=[Depends(verify_admin_key)])
async def list_products(bridge: Bridge = Depends(get_bridge)):
    """List a few products from the first connected store to confirm token scopes."""
    store_id = await _require_store(bridge)
    products = await bridge.components.nuvemshop.list_products(store_id, per_page=5)
    return {"ok": True, "count": len(products), "sample": products}
