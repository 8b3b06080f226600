"""Attribution capture from the storefront script."""

import logging

from affiliate_bridge.exceptions import MalformedInputError
from affiliate_bridge.models.attribution import AttributionCapture, AttributionRecord
from affiliate_bridge.storage.base import AttributionStore

logger = logging.getLogger(__name__)


async def capture_attribution(
    store: AttributionStore, capture: AttributionCapture
) -> AttributionRecord:
    """
    Record the tags a shopper arrived with, keyed by their checkout email.

    A later capture for the same email replaces the earlier one.

    Raises:
        MalformedInputError: If no email was posted.
    """
    email = (capture.email or "").strip()
    if not email:
        raise MalformedInputError("missing email")

    record = await store.set(email, capture.tags())
    logger.debug(f"Attribution captured: {sorted(record.tags)}")
    return record
