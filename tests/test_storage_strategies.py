"""
Tests for the hit storage strategies.
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from hit_counter.exceptions import StorageOperationError
from hit_counter.schemas.hit import HitRecord
from hit_counter.storage.strategies import DocumentHitStorage
from hit_counter.storage.windows import StatsWindows

from tests.helpers import BrokenRedis

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def hit_at(ts: datetime, **kwargs) -> HitRecord:
    return HitRecord(timestamp=ts, **kwargs)


class TestSharedBehaviour:
    """Behaviour every backend must have"""

    def test_append_assigns_id(self, any_storage):
        """Test that the backend assigns an id on append"""
        stored = asyncio.run(any_storage.append(hit_at(BASE_TIME)))

        assert stored.id is not None
        assert stored.timestamp == BASE_TIME
        assert stored.user_agent == "Unknown"
        assert stored.client_address == "Unknown"

    def test_count_grows_by_one_per_append(self, any_storage):
        """Test that each append adds exactly one record"""
        assert asyncio.run(any_storage.count()) == 0

        for i in range(3):
            asyncio.run(any_storage.append(hit_at(BASE_TIME + timedelta(minutes=i))))
            assert asyncio.run(any_storage.count()) == i + 1

    def test_ids_are_unique(self, any_storage):
        """Test that ids are never reused"""
        ids = {
            asyncio.run(any_storage.append(hit_at(BASE_TIME))).id
            for _ in range(5)
        }
        assert len(ids) == 5

    def test_list_all_returns_every_record(self, any_storage):
        """Test that list_all returns all stored fields"""
        asyncio.run(any_storage.append(
            hit_at(BASE_TIME, user_agent="curl/8.0", client_address="10.0.0.1")
        ))

        hits = asyncio.run(any_storage.list_all())
        assert len(hits) == 1
        assert hits[0].user_agent == "curl/8.0"
        assert hits[0].client_address == "10.0.0.1"
        assert hits[0].timestamp == BASE_TIME

    def test_recent_returns_ten_newest_descending(self, any_storage):
        """Test that 11 hits in increasing order give the 10 newest, newest first"""
        timestamps = [BASE_TIME + timedelta(minutes=i) for i in range(11)]
        for ts in timestamps:
            asyncio.run(any_storage.append(hit_at(ts)))

        recent = asyncio.run(any_storage.list_recent(10))

        assert [hit.timestamp for hit in recent] == list(reversed(timestamps[1:]))

    def test_stats_match_count(self, any_storage):
        """Test that totalHits always equals count"""
        now = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        for days_ago in (0, 3, 20, 45):
            asyncio.run(any_storage.append(hit_at(now - timedelta(days=days_ago))))

        windows = StatsWindows.at(now, tz=timezone.utc)
        stats = asyncio.run(any_storage.stats(windows))

        assert stats.total_hits == asyncio.run(any_storage.count()) == 4
        assert stats.hits_today == 1
        assert stats.hits_this_week == 2
        assert stats.hits_this_month == 3

    def test_stats_boundaries_are_inclusive(self, any_storage):
        """Test that a hit exactly on each boundary is counted"""
        now = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        windows = StatsWindows.at(now, tz=timezone.utc)
        for ts in (windows.today, windows.week, windows.month):
            asyncio.run(any_storage.append(hit_at(ts)))

        stats = asyncio.run(any_storage.stats(windows))

        assert stats.total_hits == 3
        assert stats.hits_today == 1
        assert stats.hits_this_week == 2
        assert stats.hits_this_month == 3

    def test_stats_on_empty_store(self, any_storage):
        """Test that an empty store reports zeros, not nulls"""
        stats = asyncio.run(any_storage.stats(StatsWindows.at()))

        assert stats.total_hits == 0
        assert stats.hits_today == 0
        assert stats.hits_this_week == 0
        assert stats.hits_this_month == 0


class TestInMemoryHitStorage:
    """Test the in-memory fallback"""

    def test_ids_are_sequential_from_one(self, memory_storage):
        ids = [asyncio.run(memory_storage.append(hit_at(BASE_TIME))).id for _ in range(3)]
        assert ids == [1, 2, 3]

    def test_concurrent_appends_are_not_lost(self, memory_storage):
        """Test that concurrent appends get distinct sequential ids"""
        async def append_many():
            return await asyncio.gather(
                *(memory_storage.append(hit_at(BASE_TIME)) for _ in range(50))
            )

        stored = asyncio.run(append_many())

        assert sorted(hit.id for hit in stored) == list(range(1, 51))
        assert asyncio.run(memory_storage.count()) == 50

    def test_list_all_is_a_snapshot(self, memory_storage):
        """Test that later appends don't change an already returned list"""
        asyncio.run(memory_storage.append(hit_at(BASE_TIME)))
        snapshot = asyncio.run(memory_storage.list_all())

        asyncio.run(memory_storage.append(hit_at(BASE_TIME)))

        assert len(snapshot) == 1
        assert asyncio.run(memory_storage.count()) == 2


class TestDocumentHitStorage:
    """Test the Redis document storage"""

    def test_ids_are_uuid_based(self, document_storage):
        stored = asyncio.run(document_storage.append(hit_at(BASE_TIME)))

        assert isinstance(stored.id, str)
        assert stored.id.startswith("hit_")
        assert len(stored.id) == len("hit_") + 32

    def test_documents_keyed_by_own_id(self, document_storage):
        """Test that each document is stored under its id as camelCase JSON"""
        stored = asyncio.run(document_storage.append(
            hit_at(BASE_TIME, user_agent="curl/8.0")
        ))

        container = document_storage.redis.hashes["test:hits"]
        assert list(container) == [stored.id]
        document = container[stored.id].decode("utf-8")
        assert '"userAgent":"curl/8.0"' in document
        assert f'"id":"{stored.id}"' in document

    def test_write_failure_raises_storage_error(self):
        storage = DocumentHitStorage(BrokenRedis(), container="test:hits")

        with pytest.raises(StorageOperationError):
            asyncio.run(storage.append(hit_at(BASE_TIME)))

    def test_read_failure_raises_storage_error(self):
        storage = DocumentHitStorage(BrokenRedis(), container="test:hits")

        with pytest.raises(StorageOperationError):
            asyncio.run(storage.count())
        with pytest.raises(StorageOperationError):
            asyncio.run(storage.stats(StatsWindows.at()))

    def test_malformed_document_raises_storage_error(self, document_storage):
        """Test that a document other writers left behind is a storage error"""
        asyncio.run(document_storage.append(hit_at(BASE_TIME)))
        document_storage.redis.hashes["test:hits"]["hit_legacy"] = b"not json"

        with pytest.raises(StorageOperationError):
            asyncio.run(document_storage.list_all())
        with pytest.raises(StorageOperationError):
            asyncio.run(document_storage.stats(StatsWindows.at()))


class TestRelationalHitStorage:
    """Test the SQLAlchemy relational storage"""

    def test_ids_are_server_generated(self, relational_storage):
        first = asyncio.run(relational_storage.append(hit_at(BASE_TIME)))
        second = asyncio.run(relational_storage.append(hit_at(BASE_TIME)))

        assert isinstance(first.id, int)
        assert second.id > first.id

    def test_client_supplied_id_is_ignored(self, relational_storage):
        stored = asyncio.run(relational_storage.append(HitRecord(id=999, timestamp=BASE_TIME)))
        assert stored.id != 999

    def test_connect_is_idempotent(self, relational_storage):
        """Test that re-running schema bootstrap keeps existing rows"""
        asyncio.run(relational_storage.append(hit_at(BASE_TIME)))

        relational_storage.connect()

        assert asyncio.run(relational_storage.count()) == 1

    def test_non_utc_timestamps_are_normalized(self, relational_storage):
        """Test that offsets are converted to UTC before storing"""
        plus_two = timezone(timedelta(hours=2))
        asyncio.run(relational_storage.append(
            hit_at(datetime(2024, 1, 1, 2, 0, tzinfo=plus_two))
        ))

        hits = asyncio.run(relational_storage.list_all())
        assert hits[0].timestamp == BASE_TIME

    def test_query_failure_raises_storage_error(self, relational_storage):
        with relational_storage.engine.begin() as conn:
            conn.exec_driver_sql("DROP TABLE hits")

        with pytest.raises(StorageOperationError):
            asyncio.run(relational_storage.count())
