"""In-process storage backends (lost on restart)."""

from collections import OrderedDict
from datetime import datetime, timedelta, timezone

from affiliate_bridge.models.attribution import AttributionRecord, normalize_customer_key
from affiliate_bridge.storage.base import AttributionStore, TokenRegistry


class InMemoryTokenRegistry(TokenRegistry):
    """Token registry held in a dict; reinstall the app after a restart."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}

    async def get(self, store_id: str) -> str | None:
        return self._tokens.get(str(store_id))

    async def set(self, store_id: str, token: str) -> None:
        self._tokens[str(store_id)] = token

    async def delete(self, store_id: str) -> bool:
        return self._tokens.pop(str(store_id), None) is not None

    async def list_store_ids(self) -> list[str]:
        return list(self._tokens)


class InMemoryAttributionStore(AttributionStore):
    """
    Attribution records in an insertion-ordered dict.

    Bounded two ways: records older than ``ttl`` are treated as absent and
    dropped on access, and once ``max_entries`` is reached the least
    recently captured record is evicted.
    """

    def __init__(self, ttl: timedelta = timedelta(days=30), max_entries: int = 100_000) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._records: OrderedDict[str, AttributionRecord] = OrderedDict()

    def _expired(self, record: AttributionRecord, now: datetime) -> bool:
        return now - record.captured_at > self.ttl

    async def get(self, email: str) -> AttributionRecord | None:
        key = normalize_customer_key(email)
        record = self._records.get(key)
        if record is None:
            return None
        if self._expired(record, datetime.now(timezone.utc)):
            del self._records[key]
            return None
        return record

    async def set(self, email: str, tags: dict[str, str]) -> AttributionRecord:
        key = normalize_customer_key(email)
        record = AttributionRecord(customer_key=key, tags=dict(tags))
        self._records.pop(key, None)
        self._records[key] = record
        while len(self._records) > self.max_entries:
            self._records.popitem(last=False)
        return record

    async def delete(self, email: str) -> bool:
        return self._records.pop(normalize_customer_key(email), None) is not None

    async def count(self) -> int:
        now = datetime.now(timezone.utc)
        # Records are ordered by capture time, so expired ones sit at the front
        while self._records:
            oldest = next(iter(self._records.values()))
            if not self._expired(oldest, now):
                break
            self._records.popitem(last=False)
        return len(self._records)
