"""Cache tier contract.

Every tier stores :class:`CacheEntry` objects namespaced by TTL class and
answers lookups through the same public operations. Expiry is evaluated at
read time against the shared :class:`TTLPolicy`, so a tier never needs to
know absolute expiry timestamps.

A tier never raises for a miss. I/O faults surface as ``CacheTierError``.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping

from namevault.services.models import CacheEntry, Record
from namevault.services.ttl_policy import TTLPolicy

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheTier(ABC):
    """Base class for cache tiers.

    Subclasses implement the storage primitives (``_load``, ``_store``,
    ``_purge``, ``_clear``); the base class applies TTL validation, expiry
    and per-tier locking.

    Args:
        policy: TTL policy used for validation and expiry
        clock: Source of UTC epoch seconds (default: time.time)
    """

    #: Tier name used in logs and statistics.
    name: str = "tier"

    def __init__(self, policy: TTLPolicy, clock: Clock | None = None) -> None:
        self.policy = policy
        self.clock: Clock = clock or time.time
        self._lock = threading.Lock()

    # ---- public contract -------------------------------------------------

    def get(self, key: int, ttl_class: str) -> Record | None:
        """Return the fresh record for ``key`` or None on a miss."""
        entry = self.get_entries([key], ttl_class).get(key)
        return entry.record if entry else None

    def get_many(
        self,
        keys: Iterable[int],
        ttl_class: str,
    ) -> tuple[dict[int, Record], set[int]]:
        """Look up several keys at once.

        Returns:
            Tuple of (hits, misses)
        """
        wanted = set(keys)
        entries = self.get_entries(wanted, ttl_class)
        hits = {key: entry.record for key, entry in entries.items()}
        return hits, wanted - hits.keys()

    def get_entries(self, keys: Iterable[int], ttl_class: str) -> dict[int, CacheEntry]:
        """Return the fresh entries among ``keys``.

        Expired entries are reported as misses and left in place.
        """
        ttl_seconds = self.policy.ttl(ttl_class)
        wanted = set(keys)
        if not wanted:
            return {}
        with self._lock:
            loaded = self._load(wanted, ttl_class)
        now = self.clock()
        return {
            key: entry
            for key, entry in loaded.items()
            if key in wanted and not entry.is_expired(ttl_seconds, now)
        }

    def put(self, key: int, record: Record, ttl_class: str) -> None:
        """Store ``record`` stamped with the current time."""
        self.put_many({key: record}, ttl_class)

    def put_many(self, records: Mapping[int, Record], ttl_class: str) -> None:
        """Store several records stamped with the current time."""
        self.policy.validate(ttl_class)
        now = self.clock()
        self.put_entries(
            CacheEntry(key=key, record=record, stored_at=now, ttl_class=ttl_class)
            for key, record in records.items()
        )

    def put_entry(self, entry: CacheEntry) -> None:
        """Store an entry keeping its original ``stored_at``."""
        self.put_entries([entry])

    def put_entries(self, entries: Iterable[CacheEntry]) -> None:
        batch = list(entries)
        for entry in batch:
            self.policy.validate(entry.ttl_class)
        if not batch:
            return
        with self._lock:
            self._store(batch)

    def purge_expired(self) -> int:
        """Delete expired entries eagerly.

        Returns:
            Number of deleted entries
        """
        with self._lock:
            return self._purge(self.clock())

    def clear(self) -> int:
        """Delete every entry.

        Returns:
            Number of deleted entries
        """
        with self._lock:
            return self._clear()

    def close(self) -> None:
        """Release resources held by the tier."""

    def _is_stale(self, entry: CacheEntry, now: float) -> bool:
        """Expired, or stored under a class the policy no longer knows."""
        if entry.ttl_class not in self.policy:
            return True
        return entry.is_expired(self.policy.ttl(entry.ttl_class), now)

    # ---- storage primitives ----------------------------------------------

    @abstractmethod
    def _load(self, keys: set[int], ttl_class: str) -> dict[int, CacheEntry]:
        """Return stored entries for ``keys``, expired or not."""

    @abstractmethod
    def _store(self, entries: list[CacheEntry]) -> None:
        """Insert or replace ``entries``."""

    @abstractmethod
    def _purge(self, now: float) -> int:
        """Delete entries stale at ``now``."""

    @abstractmethod
    def _clear(self) -> int:
        """Delete everything."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = ["CacheTier", "Clock"]
