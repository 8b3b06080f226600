"""Nuvemshop (Tiendanube) REST API connector."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from affiliate_bridge.exceptions import MissingPrerequisiteError, RemoteCallError
from affiliate_bridge.integrations.base import (
    CommercePlatform,
    CouponSpec,
    CustomFieldDefinition,
    CustomFieldValue,
    OrderRecord,
)
from affiliate_bridge.integrations.nuvemshop.mapping import parse_order

logger = logging.getLogger(__name__)

TokenLookup = Callable[[str], Awaitable[str | None]]


def _response_body(response: httpx.Response) -> str:
    try:
        return response.text[:2000]
    except httpx.ResponseNotRead:
        return ""


class NuvemshopConnector(CommercePlatform):
    """
    Nuvemshop REST API connector.

    One connector serves every connected store: each call resolves the
    store's access token through ``token_lookup`` and targets
    ``{api_base}/{api_version}/{store_id}``.

    Authentication uses the ``Authentication: bearer <token>`` header
    (sic, not ``Authorization``), and every call must carry a User-Agent
    identifying the app.
    """

    def __init__(
        self,
        token_lookup: TokenLookup,
        api_base: str = "https://api.nuvemshop.com.br",
        api_version: str = "2025-03",
        user_agent: str = "GoAffPro Bridge (contact@example.com)",
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the Nuvemshop connector.

        Args:
            token_lookup: Async callable returning the access token for a store ID.
            api_base: API host, without version.
            api_version: API version path segment.
            user_agent: User-Agent sent with every request.
            timeout: Request timeout in seconds.
        """
        self.token_lookup = token_lookup
        self.api_base = api_base.rstrip("/")
        self.api_version = api_version
        self.user_agent = user_agent
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def platform_name(self) -> str:
        return "nuvemshop"

    def store_url(self, store_id: str) -> str:
        """Base URL for one store's resources."""
        return f"{self.api_base}/{self.api_version}/{store_id}"

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "User-Agent": self.user_agent,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _auth_headers(self, store_id: str) -> dict[str, str]:
        token = await self.token_lookup(str(store_id))
        if not token:
            raise MissingPrerequisiteError(f"no access token for store {store_id}")
        return {"Authentication": f"bearer {token}"}

    async def _request(
        self,
        operation: str,
        method: str,
        store_id: str,
        path: str,
        *,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> Any:
        """Make an API request for a store, wrapping failures in RemoteCallError."""
        headers = await self._auth_headers(store_id)
        url = f"{self.store_url(store_id)}{path}"
        try:
            response = await self.client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if allow_not_found and e.response.status_code == 404:
                return None
            raise RemoteCallError(
                operation,
                f"HTTP {e.response.status_code}",
                response_body=_response_body(e.response),
                remote_status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteCallError(operation, str(e) or type(e).__name__) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteCallError(
                operation, "response is not JSON", response_body=_response_body(response)
            ) from e

    async def get_store(self, store_id: str) -> dict | None:
        """Fetch the store profile (used to confirm a token works)."""
        return await self._request("get_store", "GET", store_id, "/store", allow_not_found=True)

    async def get_order(self, store_id: str, order_id: str) -> OrderRecord | None:
        """Fetch an order by ID."""
        data = await self._request(
            "get_order", "GET", store_id, f"/orders/{order_id}", allow_not_found=True
        )
        if not data or not isinstance(data, dict):
            return None
        return parse_order(data, fallback_id=str(order_id))

    async def list_custom_fields(self, store_id: str) -> list[CustomFieldDefinition]:
        """List the order custom fields defined in a store."""
        data = await self._request(
            "list_custom_fields", "GET", store_id, "/orders/custom-fields"
        )
        if not isinstance(data, list):
            return []
        return [
            CustomFieldDefinition(
                field_id=str(item["id"]),
                name=item.get("name", ""),
                value_type=item.get("value_type", "text"),
            )
            for item in data
            if isinstance(item, dict) and item.get("id") is not None
        ]

    async def create_custom_field(
        self, store_id: str, name: str, value_type: str = "text"
    ) -> CustomFieldDefinition:
        """Create an order custom field."""
        data = await self._request(
            "create_custom_field",
            "POST",
            store_id,
            "/orders/custom-fields",
            json={"name": name, "value_type": value_type, "read_only": False, "values": []},
        )
        if not isinstance(data, dict) or data.get("id") is None:
            raise RemoteCallError("create_custom_field", f"no id returned for {name!r}")
        return CustomFieldDefinition(
            field_id=str(data["id"]),
            name=data.get("name", name),
            value_type=data.get("value_type", value_type),
        )

    async def set_order_custom_field_values(
        self, store_id: str, order_id: str, values: list[CustomFieldValue]
    ) -> None:
        """Write custom field values onto an order in one bulk update."""
        await self._request(
            "set_order_custom_field_values",
            "PUT",
            store_id,
            f"/orders/{order_id}/custom-fields/values",
            json=[{"id": v.field_id, "value": v.value} for v in values],
        )

    async def create_coupon(self, store_id: str, coupon: CouponSpec) -> dict:
        """Create a discount coupon."""
        data = await self._request(
            "create_coupon",
            "POST",
            store_id,
            "/coupons",
            json={
                "code": coupon.code,
                "type": coupon.discount_type,
                "value": f"{coupon.discount_value:.2f}",
                "max_uses": coupon.usage_limit,
                "combines_with_other_discounts": coupon.stackable,
            },
        )
        return data if isinstance(data, dict) else {}

    async def register_webhook(self, store_id: str, event: str, url: str) -> dict:
        """Subscribe a URL to a store event."""
        data = await self._request(
            "register_webhook",
            "POST",
            store_id,
            "/webhooks",
            json={"event": event, "url": url},
        )
        return data if isinstance(data, dict) else {}

    async def associate_script(self, store_id: str, script_id: int) -> dict:
        """Associate the storefront capture script with a store."""
        data = await self._request(
            "associate_script",
            "POST",
            store_id,
            "/scripts",
            json={"script_id": int(script_id), "query_params": "{}"},
        )
        return data if isinstance(data, dict) else {}

    async def list_products(self, store_id: str, per_page: int = 5) -> list[dict]:
        """List a page of products (confirms token and scopes)."""
        data = await self._request(
            "list_products", "GET", store_id, "/products", params={"per_page": per_page}
        )
        return data if isinstance(data, list) else []

    async def health_check(self, store_id: str) -> bool:
        """Check whether a store's token is accepted."""
        try:
            return await self.get_store(store_id) is not None
        except (RemoteCallError, MissingPrerequisiteError):
            return False
