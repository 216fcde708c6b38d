"""Tests for TieredCache."""

from __future__ import annotations

from namevault.services.cache.memory_cache import MemoryCacheTier
from namevault.services.cache.tiered_cache import TieredCache
from namevault.services.models import Record
from namevault.shared.constants import BASE_DAY
from namevault.shared.errors import create_cache_tier_error


def _record(key: int) -> Record:
    return Record(key=key, name=f"entity-{key}", category="character", resolved_at=0.0)


class TestTieredLookup:
    """Precedence and backfill."""

    def test_higher_tier_answers_first(self, ttl_policy, clock) -> None:
        # Given
        upper = MemoryCacheTier(ttl_policy, clock=clock)
        lower = MemoryCacheTier(ttl_policy, clock=clock)
        upper.put(1, Record(1, "upper", "character", 0.0), "names")
        lower.put(1, Record(1, "lower", "character", 0.0), "names")

        # When
        lookup = TieredCache([upper, lower]).lookup([1], "names")

        # Then
        assert lookup.hits[1].name == "upper"

    def test_lower_hit_is_backfilled_with_original_stored_at(self, ttl_policy, clock) -> None:
        # Given: lower holds an entry written half a TTL ago
        upper = MemoryCacheTier(ttl_policy, clock=clock)
        lower = MemoryCacheTier(ttl_policy, clock=clock)
        lower.put(1, _record(1), "names")
        written_at = clock()
        clock.advance(15 * BASE_DAY)

        # When
        lookup = TieredCache([upper, lower]).lookup([1, 2], "names")

        # Then
        assert set(lookup.hits) == {1}
        assert lookup.misses == {2}
        assert upper.get_entries([1], "names")[1].stored_at == written_at

        # The backfilled copy expires with the original
        clock.advance(15 * BASE_DAY + 1)
        assert upper.get(1, "names") is None

    def test_statistics_per_tier(self, ttl_policy, clock, statistics) -> None:
        upper = MemoryCacheTier(ttl_policy, clock=clock)
        lower = MemoryCacheTier(ttl_policy, clock=clock)
        lower.put(1, _record(1), "names")

        TieredCache([upper, lower], statistics=statistics).lookup([1, 2], "names")

        assert statistics.metrics.tier_misses["memory"] == 3
        assert statistics.metrics.tier_hits["memory"] == 1


class TestTierFailures:
    """A raising tier is a miss, never a crash."""

    def test_failing_tier_counts_as_miss(self, ttl_policy, clock, statistics, mocker) -> None:
        # Given
        broken = MemoryCacheTier(ttl_policy, clock=clock)
        healthy = MemoryCacheTier(ttl_policy, clock=clock)
        healthy.put(1, _record(1), "names")
        mocker.patch.object(broken, "_load", side_effect=create_cache_tier_error("memory", "boom"))
        cache = TieredCache([broken, healthy], statistics=statistics)

        # When
        lookup = cache.lookup([1, 2], "names")

        # Then
        assert set(lookup.hits) == {1}
        assert lookup.misses == {2}
        assert lookup.failed_tiers == ["memory"]
        assert statistics.metrics.tier_errors["memory"] >= 1

    def test_write_failure_reports_tier(self, ttl_policy, clock, mocker) -> None:
        # Given
        broken = MemoryCacheTier(ttl_policy, clock=clock)
        healthy = MemoryCacheTier(ttl_policy, clock=clock)
        mocker.patch.object(broken, "_store", side_effect=create_cache_tier_error("memory", "disk full"))
        cache = TieredCache([broken, healthy])

        # When
        failed = cache.put_many({1: _record(1)}, "names")

        # Then
        assert failed == ["memory"]
        assert healthy.get(1, "names") == _record(1)

    def test_empty_chain_misses_everything(self) -> None:
        lookup = TieredCache([]).lookup([1, 2], "names")

        assert lookup.misses == {1, 2}
        assert lookup.failed_tiers == []
