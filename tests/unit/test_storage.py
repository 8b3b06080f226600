"""Unit tests for token and attribution storage."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from affiliate_bridge.models.attribution import AttributionCapture
from affiliate_bridge.exceptions import MalformedInputError
from affiliate_bridge.storage.memory import InMemoryAttributionStore, InMemoryTokenRegistry
from affiliate_bridge.storage.redis_store import RedisAttributionStore, RedisTokenRegistry
from affiliate_bridge.sync.attribution import capture_attribution


class TestInMemoryTokenRegistry:
    """Tests for InMemoryTokenRegistry."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, token_registry):
        await token_registry.set("1", "tok-1")
        assert await token_registry.get("1") == "tok-1"
        assert await token_registry.get("2") is None

    @pytest.mark.asyncio
    async def test_store_ids_are_strings(self, token_registry):
        """Test numeric store IDs from webhooks and OAuth resolve to the same entry."""
        await token_registry.set(1, "tok-1")  # type: ignore[arg-type]
        assert await token_registry.get("1") == "tok-1"

    @pytest.mark.asyncio
    async def test_reinstall_overwrites_token_keeps_order(self, token_registry):
        """Test one credential per store and install order preserved."""
        await token_registry.set("1", "old")
        await token_registry.set("2", "tok-2")
        await token_registry.set("1", "new")

        assert await token_registry.get("1") == "new"
        assert await token_registry.list_store_ids() == ["1", "2"]
        assert await token_registry.first_store_id() == "1"

    @pytest.mark.asyncio
    async def test_delete(self, token_registry):
        await token_registry.set("1", "tok")
        assert await token_registry.delete("1") is True
        assert await token_registry.delete("1") is False
        assert await token_registry.first_store_id() is None


class TestInMemoryAttributionStore:
    """Tests for InMemoryAttributionStore."""

    @pytest.mark.asyncio
    async def test_key_is_normalized(self, attribution_store):
        """Test lookups ignore email case and surrounding whitespace."""
        await attribution_store.set("  A@B.com ", {"utm_source": "google"})

        record = await attribution_store.get("a@b.COM")
        assert record is not None
        assert record.customer_key == "a@b.com"
        assert record.tag("utm_source") == "google"

    @pytest.mark.asyncio
    async def test_last_write_wins(self, attribution_store):
        """Test a second capture replaces the first entirely."""
        await attribution_store.set("a@b.com", {"utm_source": "google", "utm_medium": "cpc"})
        await attribution_store.set("A@b.com", {"utm_source": "facebook"})

        record = await attribution_store.get("a@b.com")
        assert record.tags == {"utm_source": "facebook"}
        assert await attribution_store.count() == 1

    @pytest.mark.asyncio
    async def test_expired_record_is_absent(self):
        """Test records older than the TTL are not returned."""
        store = InMemoryAttributionStore(ttl=timedelta(hours=1))
        record = await store.set("a@b.com", {"utm_source": "google"})
        record.captured_at = datetime.now(timezone.utc) - timedelta(hours=2)

        assert await store.get("a@b.com") is None
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_count_prunes_expired(self):
        """Test count drops expired records from the front."""
        store = InMemoryAttributionStore(ttl=timedelta(hours=1))
        old = await store.set("old@x.com", {"utm_source": "a"})
        await store.set("new@x.com", {"utm_source": "b"})
        old.captured_at = datetime.now(timezone.utc) - timedelta(days=1)

        assert await store.count() == 1
        assert await store.get("new@x.com") is not None

    @pytest.mark.asyncio
    async def test_evicts_oldest_when_full(self):
        """Test the bound on stored records."""
        store = InMemoryAttributionStore(max_entries=2)
        await store.set("1@x.com", {"ref": "1"})
        await store.set("2@x.com", {"ref": "2"})
        await store.set("3@x.com", {"ref": "3"})

        assert await store.count() == 2
        assert await store.get("1@x.com") is None
        assert await store.get("3@x.com") is not None

    @pytest.mark.asyncio
    async def test_rewrite_refreshes_position(self):
        """Test recapturing an email protects it from eviction."""
        store = InMemoryAttributionStore(max_entries=2)
        await store.set("1@x.com", {"ref": "1"})
        await store.set("2@x.com", {"ref": "2"})
        await store.set("1@x.com", {"ref": "1b"})
        await store.set("3@x.com", {"ref": "3"})

        assert await store.get("1@x.com") is not None
        assert await store.get("2@x.com") is None

    @pytest.mark.asyncio
    async def test_delete(self, attribution_store):
        await attribution_store.set("a@b.com", {"ref": "x"})
        assert await attribution_store.delete("A@B.com") is True
        assert await attribution_store.get("a@b.com") is None


class TestCaptureAttribution:
    """Tests for capture_attribution."""

    @pytest.mark.asyncio
    async def test_captures_tags(self, attribution_store):
        """Test every non-empty posted key except email becomes a tag."""
        capture = AttributionCapture(
            email="Shopper@Example.com",
            utm_source="google",
            utm_medium="",
            gclid="abc",
            landing="/produtos",
        )
        record = await capture_attribution(attribution_store, capture)

        assert record.customer_key == "shopper@example.com"
        assert record.tags == {"utm_source": "google", "gclid": "abc", "landing": "/produtos"}

    @pytest.mark.asyncio
    async def test_missing_email(self, attribution_store):
        """Test a capture without email is rejected and nothing is stored."""
        with pytest.raises(MalformedInputError) as exc_info:
            await capture_attribution(attribution_store, AttributionCapture(utm_source="x"))
        assert exc_info.value.message == "missing email"
        assert await attribution_store.count() == 0

    @pytest.mark.asyncio
    async def test_non_string_email_is_missing(self, attribution_store):
        """Test a numeric email is dropped by the model and then rejected as missing."""
        capture = AttributionCapture(email=123, utm_source="ig")
        assert capture.email is None

        with pytest.raises(MalformedInputError):
            await capture_attribution(attribution_store, capture)
        assert await attribution_store.count() == 0

    @pytest.mark.asyncio
    async def test_blank_email(self, attribution_store):
        with pytest.raises(MalformedInputError):
            await capture_attribution(attribution_store, AttributionCapture(email="   "))


def _mock_redis(pipeline_result=None):
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=pipeline_result or [1, 1])
    client = MagicMock()
    client.pipeline.return_value = pipe
    return client, pipe


class TestRedisTokenRegistry:
    """Tests for RedisTokenRegistry."""

    @pytest.mark.asyncio
    async def test_set_keeps_first_registration_time(self):
        """Test the order set is only written when the store is new."""
        client, pipe = _mock_redis()
        registry = RedisTokenRegistry(client)

        await registry.set(7, "tok")  # type: ignore[arg-type]

        pipe.hset.assert_called_once_with("bridge:tokens", "7", "tok")
        args, kwargs = pipe.zadd.call_args
        assert args[0] == "bridge:tokens:order"
        assert "7" in args[1]
        assert kwargs == {"nx": True}
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self):
        client, _ = _mock_redis()
        client.hget = AsyncMock(return_value=b"tok")
        registry = RedisTokenRegistry(client)

        assert await registry.get("7") == "tok"
        client.hget.assert_awaited_once_with("bridge:tokens", "7")

    @pytest.mark.asyncio
    async def test_list_store_ids_in_order(self):
        client, _ = _mock_redis()
        client.zrange = AsyncMock(return_value=[b"3", "1"])
        registry = RedisTokenRegistry(client)

        assert await registry.list_store_ids() == ["3", "1"]
        assert await registry.first_store_id() == "3"

    @pytest.mark.asyncio
    async def test_delete(self):
        client, pipe = _mock_redis(pipeline_result=[0, 0])
        registry = RedisTokenRegistry(client)

        assert await registry.delete("7") is False
        pipe.hdel.assert_called_once_with("bridge:tokens", "7")


class TestRedisAttributionStore:
    """Tests for RedisAttributionStore."""

    @pytest.mark.asyncio
    async def test_set_writes_with_ttl(self):
        """Test records are written under the normalized key with an expiry."""
        client, pipe = _mock_redis()
        store = RedisAttributionStore(client, ttl=timedelta(hours=2))

        record = await store.set("A@B.com", {"utm_source": "google"})

        assert record.customer_key == "a@b.com"
        args, kwargs = pipe.set.call_args
        assert args[0] == "bridge:attribution:a@b.com"
        assert json.loads(args[1])["tags"] == {"utm_source": "google"}
        assert kwargs == {"ex": 7200}
        pipe.sadd.assert_called_once_with("bridge:attribution:index", "a@b.com")

    @pytest.mark.asyncio
    async def test_get_round_trip(self):
        client, _ = _mock_redis()
        store = RedisAttributionStore(client)
        payload = json.dumps(
            {
                "customer_key": "a@b.com",
                "tags": {"utm_source": "google"},
                "captured_at": "2025-01-01T00:00:00+00:00",
            }
        )
        client.get = AsyncMock(return_value=payload)

        record = await store.get(" a@b.com")

        client.get.assert_awaited_once_with("bridge:attribution:a@b.com")
        assert record.tag("utm_source") == "google"

    @pytest.mark.asyncio
    async def test_get_missing_or_unreadable(self):
        client, _ = _mock_redis()
        store = RedisAttributionStore(client)

        client.get = AsyncMock(return_value=None)
        assert await store.get("a@b.com") is None

        client.get = AsyncMock(return_value="{not json")
        assert await store.get("a@b.com") is None

    @pytest.mark.asyncio
    async def test_count_prunes_expired_index_entries(self):
        client, _ = _mock_redis()
        client.smembers = AsyncMock(return_value={"a@b.com", "gone@b.com"})
        client.exists = AsyncMock(side_effect=lambda key: int(key.endswith("a@b.com")))
        client.srem = AsyncMock()
        store = RedisAttributionStore(client)

        assert await store.count() == 1
        client.srem.assert_awaited_once_with("bridge:attribution:index", "gone@b.com")
