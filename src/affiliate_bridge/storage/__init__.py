"""Storage for store credentials and captured attribution."""

from affiliate_bridge.storage.base import AttributionStore, TokenRegistry
from affiliate_bridge.storage.memory import InMemoryAttributionStore, InMemoryTokenRegistry
from affiliate_bridge.storage.redis_store import RedisAttributionStore, RedisTokenRegistry

__all__ = [
    "AttributionStore",
    "InMemoryAttributionStore",
    "InMemoryTokenRegistry",
    "RedisAttributionStore",
    "RedisTokenRegistry",
    "TokenRegistry",
]
