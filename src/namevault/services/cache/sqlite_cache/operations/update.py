"""Delete operations for SQLite cache."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from namevault.services.cache.sqlite_cache.operations.base import BaseOperation
from namevault.services.cache.sqlite_cache.schema import TABLE_NAME

logger = logging.getLogger(__name__)


class UpdateOperations(BaseOperation):
    """Delete operations for cache management."""

    def delete_keys(self, keys: list[int], ttl_class: str) -> int:
        """Delete the rows of ``keys`` under ``ttl_class``.

        Returns:
            Number of deleted rows
        """
        deleted = 0
        for chunk in self._chunks(keys):
            placeholders = ",".join("?" * len(chunk))
            cursor = self.conn.execute(
                f"DELETE FROM {TABLE_NAME} WHERE ttl_class = ? AND key IN ({placeholders})",  # noqa: S608
                (ttl_class, *chunk),
            )
            deleted += cursor.rowcount
        return deleted

    def purge_expired(self, ttl_seconds: Mapping[str, int], now: float) -> int:
        """Purge expired rows and rows of unknown TTL classes.

        Args:
            ttl_seconds: TTL per known class
            now: Current UTC epoch seconds

        Returns:
            Number of purged entries
        """
        purged = 0
        for ttl_class, ttl in ttl_seconds.items():
            cursor = self.conn.execute(
                f"DELETE FROM {TABLE_NAME} WHERE ttl_class = ? AND ? - stored_at > ?",  # noqa: S608
                (ttl_class, now, ttl),
            )
            purged += cursor.rowcount

        known = list(ttl_seconds)
        placeholders = ",".join("?" * len(known))
        cursor = self.conn.execute(
            f"DELETE FROM {TABLE_NAME} WHERE ttl_class NOT IN ({placeholders})",  # noqa: S608
            known,
        )
        purged += cursor.rowcount

        if purged > 0:
            logger.info("Purged %d expired cache entries", purged)

        return purged

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of cleared entries
        """
        cursor = self.conn.execute(f"DELETE FROM {TABLE_NAME}")  # noqa: S608
        logger.info("Cleared all cache entries")
        return cursor.rowcount
