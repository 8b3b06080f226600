"""FastAPI dependencies shared by the routers."""

from fastapi import Request

from affiliate_bridge.bridge import Bridge
from affiliate_bridge.exceptions import BridgeNotReadyError


def get_bridge(request: Request) -> Bridge:
    """Return the bridge attached to the app during startup."""
    bridge = getattr(request.app.state, "bridge", None)
    if bridge is None:
        raise BridgeNotReadyError()
    return bridge
