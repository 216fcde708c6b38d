"""Insert operations for SQLite cache."""

from __future__ import annotations

import logging

import orjson

from namevault.services.cache.sqlite_cache.operations.base import BaseOperation
from namevault.services.cache.sqlite_cache.schema import TABLE_NAME
from namevault.services.models import CacheEntry, StoredRecord

logger = logging.getLogger(__name__)


class InsertOperations(BaseOperation):
    """Insert operations for cache storage."""

    def insert_many(self, entries: list[CacheEntry]) -> None:
        """Insert or replace ``entries`` keeping their ``stored_at``.

        Args:
            entries: Entries to store
        """
        rows = [
            (
                entry.key,
                entry.ttl_class,
                orjson.dumps(StoredRecord.from_entry(entry).model_dump()),
                entry.stored_at,
            )
            for entry in entries
        ]

        insert_sql = f"""
        INSERT OR REPLACE INTO {TABLE_NAME} (key, ttl_class, payload, stored_at)
        VALUES (?, ?, ?, ?)
        """  # noqa: S608
        self.conn.executemany(insert_sql, rows)

        logger.debug("Cache inserted: %d entries", len(rows))
