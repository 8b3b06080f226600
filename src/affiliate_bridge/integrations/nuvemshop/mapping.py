"""Field mapping for Nuvemshop orders and order custom fields."""

from typing import Any

from affiliate_bridge.integrations.base import OrderRecord

# Order custom fields every connected store must define
REQUIRED_CUSTOM_FIELDS: tuple[str, ...] = (
    "UTM Source",
    "UTM Medium",
    "UTM Campaign",
    "UTM Content",
    "UTM Term",
    "Affiliate Coupon",
    "Affiliate ID",
)

COUPON_FIELD = "Affiliate Coupon"

# Attribution tag -> order custom field name
TAG_FIELD_MAP: dict[str, str] = {
    "utm_source": "UTM Source",
    "utm_medium": "UTM Medium",
    "utm_campaign": "UTM Campaign",
    "utm_content": "UTM Content",
    "utm_term": "UTM Term",
    "ref": "Affiliate ID",
}


def extract_coupon_code(value: Any) -> str | None:
    """
    Read the coupon code from an order's ``coupon`` attribute.

    Nuvemshop reports coupons as a list of coupon objects; older payloads
    and test fixtures use a bare code or a single object.
    """
    if value is None:
        return None
    if isinstance(value, list):
        for item in value:
            code = extract_coupon_code(item)
            if code:
                return code
        return None
    if isinstance(value, dict):
        code = value.get("code")
        return str(code) if code else None
    code = str(value).strip()
    return code or None


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def parse_order(data: dict[str, Any], fallback_id: str | None = None) -> OrderRecord:
    """Map a Nuvemshop order resource onto an OrderRecord."""
    customer = data.get("customer") or {}
    email = customer.get("email") if isinstance(customer, dict) else None
    order_id = data.get("id", fallback_id)

    return OrderRecord(
        order_id=str(order_id) if order_id is not None else "",
        customer_email=email or data.get("contact_email") or None,
        total=data.get("total"),
        currency=_as_text(data.get("currency")),
        coupon_code=extract_coupon_code(data.get("coupon")),
        raw_data=data,
    )
