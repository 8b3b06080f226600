"""Order custom-field schema setup and value building."""

import logging

from affiliate_bridge.integrations.base import CommercePlatform, CustomFieldValue
from affiliate_bridge.integrations.nuvemshop.mapping import (
    COUPON_FIELD,
    REQUIRED_CUSTOM_FIELDS,
    TAG_FIELD_MAP,
)
from affiliate_bridge.models.attribution import AttributionRecord

logger = logging.getLogger(__name__)


async def ensure_custom_fields(
    platform: CommercePlatform,
    store_id: str,
    required: tuple[str, ...] = REQUIRED_CUSTOM_FIELDS,
) -> dict[str, str]:
    """
    Make sure every required order custom field exists in a store.

    Existing fields are matched by name and reused; only missing ones are
    created, so repeated calls create each definition at most once.

    Returns:
        Field name -> field ID for every required field.
    """
    existing = {f.name: f.field_id for f in await platform.list_custom_fields(store_id)}

    field_ids: dict[str, str] = {}
    for name in required:
        if name in existing:
            field_ids[name] = existing[name]
            continue
        created = await platform.create_custom_field(store_id, name, "text")
        logger.info(f"Created order custom field {name!r} ({created.field_id})")
        field_ids[name] = created.field_id

    return field_ids


def build_field_values(
    field_ids: dict[str, str],
    attribution: AttributionRecord | None,
    coupon_code: str | None,
) -> list[CustomFieldValue]:
    """
    Sparse list of custom field values for an order.

    Only tags that are present and mapped to a field are included, plus the
    order's coupon code when it has one.
    """
    values: list[CustomFieldValue] = []

    if attribution is not None:
        for tag, field_name in TAG_FIELD_MAP.items():
            value = attribution.tag(tag)
            field_id = field_ids.get(field_name)
            if value and field_id:
                values.append(CustomFieldValue(field_id=field_id, value=value))

    coupon_field_id = field_ids.get(COUPON_FIELD)
    if coupon_code and coupon_field_id:
        values.append(CustomFieldValue(field_id=coupon_field_id, value=coupon_code))

    return values
