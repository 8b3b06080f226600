"""Redis-backed storage so credentials and attribution survive restarts.

Keys:
- bridge:tokens - Hash of store_id -> access token
- bridge:tokens:order - Sorted set of store_id scored by first registration time
- bridge:attribution:{email} - JSON AttributionRecord with TTL
- bridge:attribution:index - Set of emails with a record (for counting)
"""

import logging
import time
from datetime import timedelta

import redis.asyncio as redis

from affiliate_bridge.models.attribution import AttributionRecord, normalize_customer_key
from affiliate_bridge.storage.base import AttributionStore, TokenRegistry

logger = logging.getLogger(__name__)

KEY_PREFIX = "bridge"


class RedisTokenRegistry(TokenRegistry):
    """Token registry in a Redis hash with a sorted set preserving install order."""

    def __init__(self, redis_client: redis.Redis, prefix: str = KEY_PREFIX) -> None:
        self.redis = redis_client
        self._tokens_key = f"{prefix}:tokens"
        self._order_key = f"{prefix}:tokens:order"

    async def get(self, store_id: str) -> str | None:
        value = await self.redis.hget(self._tokens_key, str(store_id))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, store_id: str, token: str) -> None:
        store_id = str(store_id)
        pipe = self.redis.pipeline()
        pipe.hset(self._tokens_key, store_id, token)
        pipe.zadd(self._order_key, {store_id: time.time()}, nx=True)
        await pipe.execute()

    async def delete(self, store_id: str) -> bool:
        store_id = str(store_id)
        pipe = self.redis.pipeline()
        pipe.hdel(self._tokens_key, store_id)
        pipe.zrem(self._order_key, store_id)
        removed, _ = await pipe.execute()
        return bool(removed)

    async def list_store_ids(self) -> list[str]:
        members = await self.redis.zrange(self._order_key, 0, -1)
        return [m.decode("utf-8") if isinstance(m, bytes) else m for m in members]


class RedisAttributionStore(AttributionStore):
    """Attribution records as JSON strings expiring after ``ttl``."""

    def __init__(
        self,
        redis_client: redis.Redis,
        ttl: timedelta = timedelta(days=30),
        prefix: str = KEY_PREFIX,
    ) -> None:
        self.redis = redis_client
        self.ttl = ttl
        self._prefix = f"{prefix}:attribution"
        self._index_key = f"{prefix}:attribution:index"

    def _key(self, email: str) -> str:
        return f"{self._prefix}:{normalize_customer_key(email)}"

    async def get(self, email: str) -> AttributionRecord | None:
        raw = await self.redis.get(self._key(email))
        if raw is None:
            return None
        try:
            return AttributionRecord.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable attribution record: {e}")
            return None

    async def set(self, email: str, tags: dict[str, str]) -> AttributionRecord:
        key = normalize_customer_key(email)
        record = AttributionRecord(customer_key=key, tags=dict(tags))
        pipe = self.redis.pipeline()
        pipe.set(self._key(key), record.model_dump_json(), ex=int(self.ttl.total_seconds()))
        pipe.sadd(self._index_key, key)
        await pipe.execute()
        return record

    async def delete(self, email: str) -> bool:
        key = normalize_customer_key(email)
        pipe = self.redis.pipeline()
        pipe.delete(self._key(key))
        pipe.srem(self._index_key, key)
        deleted, _ = await pipe.execute()
        return bool(deleted)

    async def count(self) -> int:
        """Count live records, pruning index entries whose record has expired."""
        emails = await self.redis.smembers(self._index_key)
        live = 0
        for email in emails:
            email = email.decode("utf-8") if isinstance(email, bytes) else email
            if await self.redis.exists(self._key(email)):
                live += 1
            else:
                await self.redis.srem(self._index_key, email)
        return live
