"""OAuth authorization-code exchange for Nuvemshop app installs."""

from dataclasses import dataclass

import httpx

from affiliate_bridge.exceptions import RemoteCallError


@dataclass
class OAuthGrant:
    """Credential issued for one store when the app is installed."""

    store_id: str
    access_token: str
    scope: str | None = None


class NuvemshopOAuth:
    """
    Exchanges the ``code`` from the install redirect for a store access token.

    Nuvemshop tokens do not expire; reinstalling the app issues a new one.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str = "https://www.tiendanube.com/apps/authorize/token",
        timeout: float = 30.0,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.timeout = timeout

    async def exchange_code(self, code: str) -> OAuthGrant:
        """
        Exchange an authorization code for an access token.

        Raises:
            RemoteCallError: If the token endpoint rejects the code or is unreachable.
        """
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
            "code": code,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.token_url, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RemoteCallError(
                    "oauth_exchange",
                    f"HTTP {e.response.status_code}",
                    response_body=e.response.text[:2000],
                    remote_status=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise RemoteCallError("oauth_exchange", str(e) or type(e).__name__) from e

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteCallError("oauth_exchange", "token response is not JSON") from e
        if not isinstance(data, dict):
            data = {}
        if "error" in data or not data.get("access_token") or data.get("user_id") is None:
            raise RemoteCallError(
                "oauth_exchange",
                data.get("error_description") or data.get("error") or "no access token returned",
                response_body=response.text[:2000],
            )

        return OAuthGrant(
            store_id=str(data["user_id"]),
            access_token=data["access_token"],
            scope=data.get("scope"),
        )
