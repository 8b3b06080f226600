"""Nuvemshop app install (OAuth callback)."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from affiliate_bridge.api.deps import get_bridge
from affiliate_bridge.bridge import Bridge
from affiliate_bridge.exceptions import BridgeError, MalformedInputError
from affiliate_bridge.sync.install import run_install_setup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["oauth"])


@router.get("/callback", response_class=PlainTextResponse)
async def oauth_callback(
    code: str | None = Query(default=None),
    bridge: Bridge = Depends(get_bridge),
) -> PlainTextResponse:
    """
    Complete an app install.

    Exchanges the authorization code for the store's token, keeps it in the
    token registry (one per store, replacing any previous one) and runs the
    install setup.
    """
    if not code:
        raise MalformedInputError("missing code")

    components = bridge.components
    try:
        grant = await components.oauth.exchange_code(code)
        logger.info(f"OAuth grant for store {grant.store_id} scopes={grant.scope}")

        await components.token_registry.set(grant.store_id, grant.access_token)

        await run_install_setup(
            components.nuvemshop,
            grant.store_id,
            redirect_url=bridge.settings.ns_redirect_url,
            script_id=bridge.settings.ns_script_id,
        )
    except BridgeError as e:
        logger.error(f"OAuth install failed: {e.message}")
        return PlainTextResponse("oauth error", status_code=500)

    return PlainTextResponse("App installed! You can close this window.")
