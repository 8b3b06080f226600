"""Platform records and connector interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class OrderRecord:
    """
    Order as fetched from the commerce platform.

    Read-only from the bridge's perspective; any field may be missing on
    guest or incomplete orders.
    """

    order_id: str
    customer_email: str | None = None
    total: str | float | None = None
    currency: str | None = None
    coupon_code: str | None = None

    raw_data: dict | None = None


@dataclass
class AffiliateRecord:
    """Affiliate as delivered by the affiliate platform."""

    affiliate_id: str | None = None
    name: str | None = None
    code: str | None = None
    email: str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "AffiliateRecord":
        affiliate_id = data.get("id")
        return cls(
            affiliate_id=str(affiliate_id) if affiliate_id not in (None, "") else None,
            name=data.get("name"),
            code=data.get("code") or data.get("ref_code"),
            email=data.get("email"),
        )


@dataclass
class CouponSpec:
    """Coupon to create in a store. Sent, never retained."""

    code: str
    discount_type: str = "percentage"
    discount_value: float = 10.0
    usage_limit: int = 0  # 0 means unlimited
    stackable: bool = False


@dataclass
class CustomFieldDefinition:
    """Named order custom field defined in a store."""

    field_id: str
    name: str
    value_type: str = "text"


@dataclass
class CustomFieldValue:
    """Value to write for one custom field on one order."""

    field_id: str
    value: str


@dataclass
class OrderPush:
    """Order summary forwarded to the affiliate platform for attribution."""

    order_id: str
    store_id: str
    coupon: str | None = None
    email: str | None = None
    total: str | float | None = None
    currency: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "email": self.email,
            "coupon": self.coupon,
            "total": self.total,
            "currency": self.currency,
            "store_id": self.store_id,
        }


@dataclass
class InstallReport:
    """Outcome of the post-install setup for a store."""

    store_id: str
    webhooks: dict[str, bool] = field(default_factory=dict)
    custom_fields: dict[str, str] = field(default_factory=dict)
    script_associated: bool | None = None


class CommercePlatform(ABC):
    """
    Remote operations the bridge needs from the commerce platform.

    Every method is scoped to a store and raises
    :class:`~affiliate_bridge.exceptions.RemoteCallError` on failure.
    """

    @property
    @abstractmethod
    def platform_name(self) -> str:
        ...

    @abstractmethod
    async def get_order(self, store_id: str, order_id: str) -> OrderRecord | None:
        """Fetch the authoritative order, or None if it does not exist."""
        ...

    @abstractmethod
    async def list_custom_fields(self, store_id: str) -> list[CustomFieldDefinition]:
        ...

    @abstractmethod
    async def create_custom_field(
        self, store_id: str, name: str, value_type: str = "text"
    ) -> CustomFieldDefinition:
        ...

    @abstractmethod
    async def set_order_custom_field_values(
        self, store_id: str, order_id: str, values: list[CustomFieldValue]
    ) -> None:
        ...

    @abstractmethod
    async def create_coupon(self, store_id: str, coupon: CouponSpec) -> dict:
        ...


class AffiliatePlatform(ABC):
    """Remote operations the bridge needs from the affiliate platform."""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        ...

    @abstractmethod
    async def send_order(self, order: OrderPush) -> bool:
        """Push an order for attribution. Returns False when skipped."""
        ...

    @abstractmethod
    async def assign_coupon(self, affiliate_id: str, code: str) -> bool:
        """Register a coupon code against an affiliate. Returns False when skipped."""
        ...
