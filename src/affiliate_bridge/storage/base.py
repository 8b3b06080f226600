"""Storage interfaces for store credentials and captured attribution."""

from abc import ABC, abstractmethod

from affiliate_bridge.models.attribution import AttributionRecord


class TokenRegistry(ABC):
    """
    Store ID -> access token.

    At most one credential per store; setting a store again overwrites its
    token but keeps its original registration order.
    """

    @abstractmethod
    async def get(self, store_id: str) -> str | None:
        ...

    @abstractmethod
    async def set(self, store_id: str, token: str) -> None:
        ...

    @abstractmethod
    async def delete(self, store_id: str) -> bool:
        ...

    @abstractmethod
    async def list_store_ids(self) -> list[str]:
        """Connected store IDs in registration order."""
        ...

    async def first_store_id(self) -> str | None:
        """The earliest-registered store that still holds a credential."""
        store_ids = await self.list_store_ids()
        return store_ids[0] if store_ids else None


class AttributionStore(ABC):
    """
    Normalized customer email -> most recent attribution record.

    Writes are last-write-wins. Records expire after the backend's TTL.
    """

    @abstractmethod
    async def get(self, email: str) -> AttributionRecord | None:
        ...

    @abstractmethod
    async def set(self, email: str, tags: dict[str, str]) -> AttributionRecord:
        ...

    @abstractmethod
    async def delete(self, email: str) -> bool:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
