"""Ordered chain of cache tiers.

Tiers are consulted in precedence order. Each tier only sees the keys the
tiers above it missed; a hit in a lower tier is backfilled into every
higher tier with its original ``stored_at``. A tier that raises
``CacheTierError`` is logged and treated as a full miss.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from namevault.core.statistics import StatisticsCollector
from namevault.services.cache.base import CacheTier
from namevault.services.models import CacheEntry, Record
from namevault.shared.constants import LogContextKeys, LogOperationNames
from namevault.shared.errors import CacheTierError
from namevault.shared.logging import log_operation_error

logger = logging.getLogger(__name__)


@dataclass
class TierLookup:
    """Result of a chain lookup.

    Attributes:
        hits: Fresh records found in any tier
        misses: Keys no tier could answer
        failed_tiers: Names of tiers that raised during the lookup
    """

    hits: dict[int, Record] = field(default_factory=dict)
    misses: set[int] = field(default_factory=set)
    failed_tiers: list[str] = field(default_factory=list)


class TieredCache:
    """Fallback chain over cache tiers.

    Args:
        tiers: Tiers in precedence order, fastest first
        statistics: Optional statistics collector

    Example:
        >>> cache = TieredCache([memory_tier, sqlite_tier])
        >>> lookup = cache.lookup([1, 2, 3], "names")
        >>> sorted(lookup.misses)
        [3]
    """

    def __init__(
        self,
        tiers: Sequence[CacheTier],
        statistics: StatisticsCollector | None = None,
    ) -> None:
        self.tiers: tuple[CacheTier, ...] = tuple(tiers)
        self.statistics = statistics

    def __len__(self) -> int:
        return len(self.tiers)

    def lookup(self, keys: Iterable[int], ttl_class: str) -> TierLookup:
        """Query tiers in order, backfilling higher tiers on lower hits."""
        result = TierLookup(misses=set(keys))

        for index, tier in enumerate(self.tiers):
            if not result.misses:
                break
            try:
                entries = tier.get_entries(result.misses, ttl_class)
            except CacheTierError as e:
                self._tier_failed(tier, e, LogOperationNames.CACHE_LOOKUP, ttl_class)
                result.failed_tiers.append(tier.name)
                continue

            if self.statistics is not None:
                self.statistics.record_cache_hit(tier.name, len(entries))
                self.statistics.record_cache_miss(tier.name, len(result.misses) - len(entries))

            if not entries:
                continue

            for key, entry in entries.items():
                result.hits[key] = entry.record
            result.misses -= entries.keys()
            self._backfill(self.tiers[:index], list(entries.values()), ttl_class)

        return result

    def get_many(self, keys: Iterable[int], ttl_class: str) -> tuple[dict[int, Record], set[int]]:
        """Tier contract view of :meth:`lookup`."""
        result = self.lookup(keys, ttl_class)
        return result.hits, result.misses

    def get(self, key: int, ttl_class: str) -> Record | None:
        return self.lookup([key], ttl_class).hits.get(key)

    def put_many(self, records: Mapping[int, Record], ttl_class: str) -> list[str]:
        """Write ``records`` to every tier.

        Returns:
            Names of tiers that failed the write
        """
        failed: list[str] = []
        if not records:
            return failed
        for tier in self.tiers:
            try:
                tier.put_many(records, ttl_class)
            except CacheTierError as e:
                self._tier_failed(tier, e, LogOperationNames.CACHE_WRITE_BACK, ttl_class)
                failed.append(tier.name)
        return failed

    def put(self, key: int, record: Record, ttl_class: str) -> list[str]:
        return self.put_many({key: record}, ttl_class)

    def purge_expired(self) -> int:
        """Purge every tier; failing tiers are logged and skipped."""
        purged = 0
        for tier in self.tiers:
            try:
                purged += tier.purge_expired()
            except CacheTierError as e:
                self._tier_failed(tier, e, LogOperationNames.CACHE_PURGE, None)
        return purged

    def clear(self) -> int:
        cleared = 0
        for tier in self.tiers:
            try:
                cleared += tier.clear()
            except CacheTierError as e:
                self._tier_failed(tier, e, LogOperationNames.CACHE_PURGE, None)
        return cleared

    def close(self) -> None:
        for tier in self.tiers:
            tier.close()

    def _backfill(self, higher: Sequence[CacheTier], entries: list[CacheEntry], ttl_class: str) -> None:
        for tier in higher:
            try:
                tier.put_entries(entries)
            except CacheTierError as e:
                self._tier_failed(tier, e, LogOperationNames.CACHE_BACKFILL, ttl_class)

    def _tier_failed(
        self,
        tier: CacheTier,
        error: CacheTierError,
        operation: str,
        ttl_class: str | None,
    ) -> None:
        if self.statistics is not None:
            self.statistics.record_cache_error(tier.name)
        context: dict[str, str] = {LogContextKeys.TIER: tier.name}
        if ttl_class is not None:
            context[LogContextKeys.TTL_CLASS] = ttl_class
        log_operation_error(
            logger=logger,
            error=error,
            operation=operation,
            additional_context=context,
            level=logging.WARNING,
        )


__all__ = ["TierLookup", "TieredCache"]
