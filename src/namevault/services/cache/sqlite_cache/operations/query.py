"""Query operations for SQLite cache."""

from __future__ import annotations

import logging

import orjson
from pydantic import ValidationError

from namevault.services.cache.sqlite_cache.operations.base import BaseOperation
from namevault.services.cache.sqlite_cache.schema import TABLE_NAME
from namevault.services.models import CacheEntry, StoredRecord

logger = logging.getLogger(__name__)


def _build_entry_from_row(key: int, ttl_class: str, payload: bytes, stored_at: float) -> CacheEntry | None:
    """Build a CacheEntry from a database row.

    Returns:
        CacheEntry instance or None if the payload cannot be decoded
    """
    try:
        stored = StoredRecord.model_validate(orjson.loads(payload))
    except (orjson.JSONDecodeError, ValidationError) as e:
        logger.warning("Failed to decode cache payload for key %s (%s): %s", key, ttl_class, e)
        return None

    entry = stored.to_entry()
    if entry.key != key or entry.ttl_class != ttl_class:
        logger.warning("Cache payload mismatch for key %s (%s)", key, ttl_class)
        return None
    # The column is authoritative for freshness.
    return CacheEntry(key=key, record=entry.record, stored_at=stored_at, ttl_class=ttl_class)


class QueryOperations(BaseOperation):
    """Query operations for cache retrieval."""

    def get_many(self, keys: set[int], ttl_class: str) -> tuple[dict[int, CacheEntry], list[int]]:
        """Fetch stored entries for ``keys``, expired or not.

        Args:
            keys: Keys to look up
            ttl_class: TTL class namespace

        Returns:
            Tuple of (entries by key, keys whose rows could not be decoded)
        """
        found: dict[int, CacheEntry] = {}
        corrupted: list[int] = []
        for chunk in self._chunks(sorted(keys)):
            placeholders = ",".join("?" * len(chunk))
            sql = f"""
            SELECT key, ttl_class, payload, stored_at
            FROM {TABLE_NAME}
            WHERE ttl_class = ? AND key IN ({placeholders})
            """  # noqa: S608
            for key, row_class, payload, stored_at in self.conn.execute(sql, (ttl_class, *chunk)):
                entry = _build_entry_from_row(key, row_class, payload, stored_at)
                if entry is None:
                    corrupted.append(key)
                else:
                    found[key] = entry

        return found, corrupted

    def count(self) -> int:
        """Total number of stored rows."""
        cursor = self.conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}")  # noqa: S608
        return int(cursor.fetchone()[0])
