"""Tests for StatisticsCollector."""

from __future__ import annotations

from namevault.core.statistics import StatisticsCollector


class TestStatisticsCollector:
    def test_cache_counters_per_tier(self) -> None:
        stats = StatisticsCollector()

        stats.record_cache_hit("memory", 3)
        stats.record_cache_miss("memory", 1)
        stats.record_cache_hit("sqlite")
        stats.record_cache_error("file")

        summary = stats.get_summary()["cache"]
        assert summary["hits"] == {"memory": 3, "sqlite": 1}
        assert summary["misses"] == {"memory": 1}
        assert summary["errors"] == {"file": 1}
        assert summary["hit_ratio"] == 80.0

    def test_hit_ratio_without_lookups(self) -> None:
        assert StatisticsCollector().get_cache_hit_ratio() == 0.0

    def test_api_counters(self) -> None:
        stats = StatisticsCollector()

        stats.record_api_call("/universe/names/", success=True, duration=0.5)
        stats.record_api_call("/universe/names/", success=False, duration=0.25)
        stats.record_rate_limit_hit()

        api = stats.get_summary()["api"]
        assert api == {"calls": 2, "errors": 1, "rate_limit_hits": 1, "total_time": 0.75}

    def test_resolution_counters(self) -> None:
        stats = StatisticsCollector()

        stats.record_resolve(10)
        stats.record_resolve(5)
        stats.record_escalation(2)
        stats.record_placeholders(4)

        assert stats.get_summary()["resolution"] == {
            "resolve_calls": 2,
            "keys_requested": 15,
            "escalated_batches": 2,
            "placeholders": 4,
        }

    def test_reset(self) -> None:
        stats = StatisticsCollector()
        stats.record_resolve(3)
        stats.record_cache_hit("memory")

        stats.reset()

        assert stats.metrics.resolve_calls == 0
        assert stats.metrics.cache_hits == 0
