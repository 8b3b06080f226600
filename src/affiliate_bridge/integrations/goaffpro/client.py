"""GoAffPro admin API client."""

import logging
from typing import Any

import httpx

from affiliate_bridge.exceptions import RemoteCallError
from affiliate_bridge.integrations.base import AffiliatePlatform, OrderPush

logger = logging.getLogger(__name__)


class GoAffProClient(AffiliatePlatform):
    """
    GoAffPro admin API client.

    Authentication uses the ``X-Goaffpro-Access-Token`` header. When no
    access token is configured every write is skipped with a warning so a
    partially configured bridge still acknowledges webhooks.
    """

    def __init__(
        self,
        access_token: str,
        api_base: str = "https://api.goaffpro.com",
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the GoAffPro client.

        Args:
            access_token: GoAffPro admin access token (may be empty).
            api_base: API base URL.
            timeout: Request timeout in seconds.
        """
        self.access_token = access_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def platform_name(self) -> str:
        return "goaffpro"

    @property
    def configured(self) -> bool:
        return bool(self.access_token)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_base,
                headers={
                    "X-Goaffpro-Access-Token": self.access_token,
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

    async def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> Any:
        """Make an API request, wrapping failures in RemoteCallError."""
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteCallError(
                operation,
                f"HTTP {e.response.status_code}",
                response_body=e.response.text[:2000],
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
                operation, "response is not JSON", response_body=response.text[:2000]
            ) from e

    async def send_order(self, order: OrderPush) -> bool:
        """
        Push an order to GoAffPro so it can attribute it to an affiliate.

        Missing coupon or email are sent as null; GoAffPro applies its own
        attribution rules.
        """
        if not self.configured:
            logger.warning("GoAffPro access token missing; skipping send order")
            return False
        await self._request("goaffpro_send_order", "POST", "/admin/orders", json=order.to_payload())
        logger.info(f"GoAffPro order queued: {order.order_id}")
        return True

    async def assign_coupon(self, affiliate_id: str, code: str) -> bool:
        """Register a coupon code against an affiliate."""
        if not self.configured:
            logger.warning("GoAffPro access token missing; skipping assign coupon")
            return False
        await self._request(
            "goaffpro_assign_coupon",
            "POST",
            f"/admin/affiliates/{affiliate_id}/coupons",
            json={"code": code},
        )
        logger.info(f"GoAffPro coupon assigned: affiliate={affiliate_id} code={code}")
        return True

    async def ping(self) -> bool:
        """Check that the access token is accepted."""
        if not self.configured:
            return False
        try:
            await self._request("goaffpro_ping", "GET", "/admin/ping")
            return True
        except RemoteCallError as e:
            logger.warning(f"GoAffPro ping failed: {e}")
            return False
