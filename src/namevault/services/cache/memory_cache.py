"""In-process memory tier.

Bounded LRU over an ``OrderedDict``. Entries are keyed by
``(ttl_class, key)`` so classes never collide.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from namevault.services.cache.base import CacheTier, Clock
from namevault.services.models import CacheEntry
from namevault.services.ttl_policy import TTLPolicy
from namevault.shared.constants import CacheConfig
from namevault.shared.errors import DomainError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


class MemoryCacheTier(CacheTier):
    """Bounded least-recently-used cache held in process memory.

    Args:
        policy: TTL policy
        max_entries: Capacity; the least recently used entry is evicted first
        clock: Source of UTC epoch seconds
    """

    name = CacheConfig.TIER_MEMORY

    def __init__(
        self,
        policy: TTLPolicy,
        max_entries: int = CacheConfig.MEMORY_MAX_ENTRIES,
        clock: Clock | None = None,
    ) -> None:
        if max_entries < 1:
            raise DomainError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"max_entries must be at least 1, got {max_entries}",
                context=ErrorContext(
                    operation="initialize_cache",
                    additional_data={"tier": self.name, "max_entries": max_entries},
                ),
            )
        super().__init__(policy, clock)
        self.max_entries = max_entries
        self._entries: OrderedDict[tuple[str, int], CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _load(self, keys: set[int], ttl_class: str) -> dict[int, CacheEntry]:
        found: dict[int, CacheEntry] = {}
        for key in keys:
            slot = (ttl_class, key)
            entry = self._entries.get(slot)
            if entry is not None:
                self._entries.move_to_end(slot)
                found[key] = entry
        return found

    def _store(self, entries: list[CacheEntry]) -> None:
        for entry in entries:
            slot = (entry.ttl_class, entry.key)
            self._entries[slot] = entry
            self._entries.move_to_end(slot)
        evicted = 0
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            evicted += 1
        if evicted:
            logger.debug("Memory tier evicted %d entries", evicted)

    def _purge(self, now: float) -> int:
        stale = [slot for slot, entry in self._entries.items() if self._is_stale(entry, now)]
        for slot in stale:
            del self._entries[slot]
        return len(stale)

    def _clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def close(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = ["MemoryCacheTier"]
