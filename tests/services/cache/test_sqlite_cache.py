"""Tests for SQLiteCacheTier."""

from __future__ import annotations

import pytest

from namevault.services.cache.sqlite_cache import SQLiteCacheTier
from namevault.services.cache.sqlite_cache.schema import SCHEMA_VERSION, TABLE_NAME, SchemaManager
from namevault.services.models import Record
from namevault.shared.constants import BASE_DAY, BASE_MINUTE
from namevault.shared.errors import CacheTierError, ErrorCode, InfrastructureError

pytestmark = pytest.mark.integration


@pytest.fixture
def sqlite_tier(cache_dir, ttl_policy, clock):
    tier = SQLiteCacheTier(cache_dir / "cache.db", ttl_policy, clock=clock)
    yield tier
    tier.close()


def _records(*keys: int) -> dict[int, Record]:
    return {key: Record(key, f"entity-{key}", "character", 0.0) for key in keys}


class TestSQLiteCacheTier:
    """Storage contract."""

    def test_schema_is_created(self, sqlite_tier) -> None:
        assert SchemaManager(sqlite_tier.conn).get_current_version() == SCHEMA_VERSION

    def test_put_many_and_get_many(self, sqlite_tier) -> None:
        sqlite_tier.put_many(_records(1, 2, 3), "names")

        hits, misses = sqlite_tier.get_many([1, 3, 4], "names")

        assert sorted(hits) == [1, 3]
        assert misses == {4}
        assert len(sqlite_tier) == 3

    def test_large_lookup_is_chunked(self, sqlite_tier) -> None:
        keys = list(range(1, 2_001))
        sqlite_tier.put_many(_records(*keys), "names")

        hits, misses = sqlite_tier.get_many(keys, "names")

        assert len(hits) == 2_000
        assert misses == set()

    def test_same_key_under_two_classes(self, sqlite_tier) -> None:
        sqlite_tier.put(1, Record(1, "as-name", "character", 0.0), "names")
        sqlite_tier.put(1, Record(1, "as-status", "character", 0.0), "status")

        assert sqlite_tier.get(1, "names").name == "as-name"
        assert sqlite_tier.get(1, "status").name == "as-status"
        assert len(sqlite_tier) == 2

    def test_replace_existing_row(self, sqlite_tier) -> None:
        sqlite_tier.put(1, Record(1, "old", "character", 0.0), "names")
        sqlite_tier.put(1, Record(1, "new", "character", 0.0), "names")

        assert sqlite_tier.get(1, "names").name == "new"
        assert len(sqlite_tier) == 1

    def test_persists_across_connections(self, cache_dir, ttl_policy, clock) -> None:
        first = SQLiteCacheTier(cache_dir / "cache.db", ttl_policy, clock=clock)
        first.put_many(_records(7), "names")
        first.close()

        second = SQLiteCacheTier(cache_dir / "cache.db", ttl_policy, clock=clock)
        try:
            assert second.get(7, "names") == _records(7)[7]
        finally:
            second.close()


class TestSQLiteExpiry:
    def test_expired_row_is_a_miss(self, sqlite_tier, clock) -> None:
        sqlite_tier.put_many(_records(1), "status")

        clock.advance(5 * BASE_MINUTE + 1)

        assert sqlite_tier.get(1, "status") is None
        assert len(sqlite_tier) == 1

    def test_purge_expired(self, sqlite_tier, clock) -> None:
        # Given
        sqlite_tier.put_many(_records(1, 2), "status")
        sqlite_tier.put_many(_records(3), "names")
        clock.advance(BASE_DAY)

        # When
        purged = sqlite_tier.purge_expired()

        # Then
        assert purged == 2
        assert len(sqlite_tier) == 1

    def test_purge_on_startup(self, cache_dir, ttl_policy, clock) -> None:
        first = SQLiteCacheTier(cache_dir / "cache.db", ttl_policy, clock=clock)
        first.put_many(_records(1), "status")
        first.close()
        clock.advance(BASE_DAY)

        second = SQLiteCacheTier(cache_dir / "cache.db", ttl_policy, clock=clock, purge_on_startup=True)
        try:
            assert len(second) == 0
        finally:
            second.close()


class TestSQLiteFailures:
    def test_corrupted_row_is_deleted(self, sqlite_tier) -> None:
        # Given
        sqlite_tier.put_many(_records(1), "names")
        sqlite_tier.conn.execute(f"UPDATE {TABLE_NAME} SET payload = ? WHERE key = 1", (b"garbage",))  # noqa: S608

        # When
        result = sqlite_tier.get(1, "names")

        # Then
        assert result is None
        assert len(sqlite_tier) == 0

    def test_closed_tier_raises_tier_error(self, cache_dir, ttl_policy) -> None:
        tier = SQLiteCacheTier(cache_dir / "cache.db", ttl_policy)
        tier.close()

        with pytest.raises(CacheTierError):
            tier.get(1, "names")

    def test_unopenable_database(self, tmp_path, ttl_policy) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(InfrastructureError):
            SQLiteCacheTier(blocker / "cache.db", ttl_policy)

    def test_key_outside_integer_range_is_a_miss(self, sqlite_tier) -> None:
        # Given
        sqlite_tier.put_many(_records(1), "names")

        # When
        sqlite_tier.put_many({2**64: Record(2**64, "huge", "character", 0.0)}, "names")
        hits, misses = sqlite_tier.get_many([1, 2**64, -(2**63) - 1], "names")

        # Then
        assert sorted(hits) == [1]
        assert misses == {2**64, -(2**63) - 1}
        assert len(sqlite_tier) == 1

    def test_driver_overflow_becomes_tier_error(self, sqlite_tier, mocker) -> None:
        mocker.patch.object(sqlite_tier._insert_ops, "insert_many", side_effect=OverflowError("too large"))

        with pytest.raises(CacheTierError) as exc_info:
            sqlite_tier.put_many(_records(1), "names")

        assert exc_info.value.code == ErrorCode.CACHE_WRITE_FAILED
        assert len(sqlite_tier) == 0
