"""Post-install setup for a newly connected Nuvemshop store."""

import logging
from urllib.parse import urlparse

from affiliate_bridge.exceptions import BridgeError, RemoteCallError
from affiliate_bridge.integrations.base import InstallReport
from affiliate_bridge.integrations.nuvemshop.connector import NuvemshopConnector
from affiliate_bridge.sync.custom_fields import ensure_custom_fields

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/webhooks/nuvemshop"
INSTALL_WEBHOOK_EVENTS: tuple[str, ...] = ("order/paid", "app/uninstalled")


def public_url(redirect_url: str, pathname: str) -> str:
    """Absolute URL on the bridge's public origin, taken from the OAuth redirect URL."""
    parsed = urlparse(redirect_url or "")
    if not parsed.scheme or not parsed.netloc:
        return pathname
    return f"{parsed.scheme}://{parsed.netloc}{pathname}"


async def run_install_setup(
    connector: NuvemshopConnector,
    store_id: str,
    redirect_url: str,
    script_id: int | None = None,
) -> InstallReport:
    """
    Subscribe to order webhooks, create order custom fields and attach the
    capture script.

    Webhook and script failures are logged and skipped (Nuvemshop answers
    422 when a subscription already exists). Custom-field failures
    propagate.
    """
    report = InstallReport(store_id=store_id)
    webhook_url = public_url(redirect_url, WEBHOOK_PATH)

    for event in INSTALL_WEBHOOK_EVENTS:
        try:
            await connector.register_webhook(store_id, event, webhook_url)
            report.webhooks[event] = True
            logger.info(f"Webhook registered: {event} -> {webhook_url}")
        except RemoteCallError as e:
            report.webhooks[event] = False
            logger.info(f"Webhook register {event} -> {e.remote_status or e.message}")

    report.custom_fields = await ensure_custom_fields(connector, store_id)

    if script_id:
        try:
            await connector.associate_script(store_id, script_id)
            report.script_associated = True
            logger.info(f"Script associated: {script_id}")
        except BridgeError as e:
            report.script_associated = False
            logger.warning(f"Script association failed: {e.message}")

    return report
