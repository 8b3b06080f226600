"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables
os.environ.setdefault("NS_CLIENT_SECRET", "test-secret")
os.environ.setdefault("GOAFFPRO_WEBHOOK_SECRET", "hook-secret")
os.environ.setdefault("ENABLE_METRICS", "false")
os.environ.setdefault("LOG_JSON", "false")

from affiliate_bridge.exceptions import RemoteCallError  # noqa: E402
from affiliate_bridge.integrations.base import (  # noqa: E402
    AffiliatePlatform,
    CommercePlatform,
    CouponSpec,
    CustomFieldDefinition,
    CustomFieldValue,
    OrderPush,
    OrderRecord,
)
from affiliate_bridge.integrations.nuvemshop.mapping import parse_order  # noqa: E402
from affiliate_bridge.storage.memory import (  # noqa: E402
    InMemoryAttributionStore,
    InMemoryTokenRegistry,
)


class FakeCommerce(CommercePlatform):
    """In-memory Nuvemshop stand-in that records every write."""

    def __init__(self) -> None:
        self.orders: dict[tuple[str, str], dict] = {}
        self.fields: dict[str, list[CustomFieldDefinition]] = {}
        self.created_fields: list[tuple[str, str]] = []
        self.field_writes: list[tuple[str, str, list[CustomFieldValue]]] = []
        self.coupons: list[tuple[str, CouponSpec]] = []
        self.webhooks: list[tuple[str, str, str]] = []
        self.scripts: list[tuple[str, int]] = []
        self.fail: set[str] = set()
        self.closed = False

    @property
    def platform_name(self) -> str:
        return "fake-commerce"

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail:
            raise RemoteCallError(operation, "HTTP 500", response_body="boom", remote_status=500)

    async def get_order(self, store_id: str, order_id: str) -> OrderRecord | None:
        self._maybe_fail("get_order")
        data = self.orders.get((str(store_id), str(order_id)))
        return parse_order(data) if data is not None else None

    async def list_custom_fields(self, store_id: str) -> list[CustomFieldDefinition]:
        self._maybe_fail("list_custom_fields")
        return list(self.fields.get(str(store_id), []))

    async def create_custom_field(
        self, store_id: str, name: str, value_type: str = "text"
    ) -> CustomFieldDefinition:
        self._maybe_fail("create_custom_field")
        existing = self.fields.setdefault(str(store_id), [])
        definition = CustomFieldDefinition(
            field_id=f"cf-{len(self.created_fields) + 1}", name=name, value_type=value_type
        )
        existing.append(definition)
        self.created_fields.append((str(store_id), name))
        return definition

    async def set_order_custom_field_values(
        self, store_id: str, order_id: str, values: list[CustomFieldValue]
    ) -> None:
        self._maybe_fail("set_order_custom_field_values")
        self.field_writes.append((str(store_id), str(order_id), list(values)))

    async def create_coupon(self, store_id: str, coupon: CouponSpec) -> dict:
        self._maybe_fail("create_coupon")
        self.coupons.append((str(store_id), coupon))
        return {"id": len(self.coupons), "code": coupon.code}

    async def register_webhook(self, store_id: str, event: str, url: str) -> dict:
        self._maybe_fail(f"register_webhook:{event}")
        self.webhooks.append((str(store_id), event, url))
        return {"event": event, "url": url}

    async def associate_script(self, store_id: str, script_id: int) -> dict:
        self._maybe_fail("associate_script")
        self.scripts.append((str(store_id), script_id))
        return {}

    async def list_products(self, store_id: str, per_page: int = 5) -> list[dict]:
        self._maybe_fail("list_products")
        return [{"id": 1, "name": {"pt": "Camiseta"}}][:per_page]

    async def health_check(self, store_id: str) -> bool:
        return "get_store" not in self.fail

    async def close(self) -> None:
        self.closed = True

    def field_name(self, store_id: str, field_id: str) -> str:
        for definition in self.fields.get(str(store_id), []):
            if definition.field_id == field_id:
                return definition.name
        raise KeyError(field_id)


class FakeAffiliates(AffiliatePlatform):
    """GoAffPro stand-in recording pushed orders and coupon assignments."""

    def __init__(self) -> None:
        self.orders: list[OrderPush] = []
        self.assignments: list[tuple[str, str]] = []
        self.fail: set[str] = set()
        self.configured = True
        self.closed = False

    @property
    def platform_name(self) -> str:
        return "fake-affiliates"

    async def send_order(self, order: OrderPush) -> bool:
        if "send_order" in self.fail:
            raise RemoteCallError("goaffpro_send_order", "HTTP 503", remote_status=503)
        self.orders.append(order)
        return True

    async def assign_coupon(self, affiliate_id: str, code: str) -> bool:
        if "assign_coupon" in self.fail:
            raise RemoteCallError("goaffpro_assign_coupon", "HTTP 500", remote_status=500)
        self.assignments.append((affiliate_id, code))
        return True

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fake_commerce() -> FakeCommerce:
    return FakeCommerce()


@pytest.fixture
def fake_affiliates() -> FakeAffiliates:
    return FakeAffiliates()


@pytest.fixture
def attribution_store() -> InMemoryAttributionStore:
    return InMemoryAttributionStore()


@pytest.fixture
def token_registry() -> InMemoryTokenRegistry:
    return InMemoryTokenRegistry()


@pytest.fixture
def sample_order() -> dict:
    """Nuvemshop order resource as returned by GET /orders/{id}."""
    return {
        "id": 42,
        "coupon": "X",
        "customer": {"email": "a@b.com"},
        "total": 100,
        "currency": "USD",
    }


@pytest.fixture
def sample_affiliate_event() -> dict:
    """GoAffPro affiliate signup webhook body."""
    return {
        "event": "affiliate_signup",
        "affiliate": {
            "id": 555,
            "name": "Maria Café",
            "code": "café#10",
            "email": "maria@example.com",
        },
    }
