"""SQLite cache tier facade.

This module provides the persistent structured-store tier built from the
modular schema, query, insert and update operations.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import orjson

from namevault.services.cache.base import CacheTier, Clock
from namevault.services.cache.sqlite_cache.operations import (
    InsertOperations,
    QueryOperations,
    UpdateOperations,
)
from namevault.services.cache.sqlite_cache.schema import SchemaManager
from namevault.services.cache.sqlite_cache.transaction import TransactionManager
from namevault.services.models import CacheEntry
from namevault.services.ttl_policy import TTLPolicy
from namevault.shared.constants import CacheConfig, LogOperationNames
from namevault.shared.errors import (
    CacheTierError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    create_cache_tier_error,
)
from namevault.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

# Driver and encoding failures surfaced as CacheTierError
_STORAGE_ERRORS = (sqlite3.Error, OverflowError, ValueError, orjson.JSONEncodeError)


def _bindable(key: int) -> bool:
    """True if ``key`` fits a SQLite INTEGER column."""
    return CacheConfig.SQLITE_MIN_INTEGER <= key <= CacheConfig.SQLITE_MAX_INTEGER


class SQLiteCacheTier(CacheTier):
    """SQLite-backed cache tier.

    Rows live in ``resolved_entities(key, ttl_class, payload, stored_at)``
    keyed by ``(key, ttl_class)``. The database runs in WAL mode and all
    access is serialized by the tier lock.

    Attributes:
        db_path: Path to SQLite database file
        conn: SQLite database connection

    Example:
        >>> tier = SQLiteCacheTier(Path("cache.db"), TTLPolicy())
        >>> tier.put(42, record, "names")
        >>> tier.get(42, "names")
        >>> tier.close()
    """

    name = CacheConfig.TIER_SQLITE

    def __init__(
        self,
        db_path: Path | str,
        policy: TTLPolicy,
        clock: Clock | None = None,
        *,
        purge_on_startup: bool = False,
    ) -> None:
        """Initialize SQLite cache tier.

        Args:
            db_path: Path to SQLite database file
            policy: TTL policy
            clock: Source of UTC epoch seconds
            purge_on_startup: Delete expired rows during initialization

        Raises:
            InfrastructureError: If database initialization fails
        """
        super().__init__(policy, clock)
        self.db_path = Path(db_path)
        self.conn: sqlite3.Connection | None = None
        self._initialize_db(purge_on_startup=purge_on_startup)

    def _initialize_db(self, *, purge_on_startup: bool) -> None:
        """Initialize database with WAL mode and schema.

        Raises:
            InfrastructureError: If database connection or schema creation fails
        """
        context = ErrorContext(
            operation=LogOperationNames.INITIALIZE_CACHE,
            additional_data={"tier": self.name, "db_path": str(self.db_path)},
        )

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,  # access is serialized by the tier lock
                isolation_level=None,
            )
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")

            SchemaManager(self.conn).create_tables()

            self._transactions = TransactionManager(self.conn)
            self._query_ops = QueryOperations(self.conn)
            self._insert_ops = InsertOperations(self.conn)
            self._update_ops = UpdateOperations(self.conn)
        except (sqlite3.Error, OSError) as e:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
            error = InfrastructureError(
                code=ErrorCode.CACHE_ERROR,
                message=f"Failed to initialize SQLite cache: {e!s}",
                context=context,
                original_error=e,
            )
            log_operation_error(logger=logger, error=error)
            raise error from e

        if purge_on_startup:
            try:
                purged_count = self.purge_expired()
            except CacheTierError as e:
                log_operation_error(logger=logger, error=e, level=logging.WARNING)
            else:
                if purged_count > 0:
                    logger.info("Purged %d expired cache entries on startup", purged_count)

        log_operation_success(
            logger=logger,
            operation=LogOperationNames.INITIALIZE_CACHE,
            duration_ms=0,
            context=context,
        )

    def _tier_error(self, operation: str, e: Exception, code: ErrorCode) -> CacheTierError:
        return create_cache_tier_error(
            tier=self.name,
            message=f"SQLite cache {operation} failed: {e!s}",
            code=code,
            operation=operation,
            file_path=str(self.db_path),
            original_error=e,
        )

    def _require_connection(self, operation: str) -> None:
        if self.conn is None:
            raise self._tier_error(
                operation,
                RuntimeError("Database connection not initialized"),
                ErrorCode.CACHE_ERROR,
            )

    def _load(self, keys: set[int], ttl_class: str) -> dict[int, CacheEntry]:
        self._require_connection(LogOperationNames.CACHE_GET)
        # Keys SQLite cannot represent are never stored, so they are misses
        bindable = {key for key in keys if _bindable(key)}
        if not bindable:
            return {}
        try:
            found, corrupted = self._query_ops.get_many(bindable, ttl_class)
            if corrupted:
                self._update_ops.delete_keys(corrupted, ttl_class)
        except _STORAGE_ERRORS as e:
            raise self._tier_error(LogOperationNames.CACHE_GET, e, ErrorCode.CACHE_READ_FAILED) from e
        return found

    def _store(self, entries: list[CacheEntry]) -> None:
        self._require_connection(LogOperationNames.CACHE_PUT)
        storable = [entry for entry in entries if _bindable(entry.key)]
        if len(storable) < len(entries):
            logger.debug("SQLite tier skipped %d keys outside the INTEGER range", len(entries) - len(storable))
        if not storable:
            return
        try:
            with self._transactions.transaction():
                self._insert_ops.insert_many(storable)
        except _STORAGE_ERRORS as e:
            raise self._tier_error(LogOperationNames.CACHE_PUT, e, ErrorCode.CACHE_WRITE_FAILED) from e

    def _purge(self, now: float) -> int:
        self._require_connection(LogOperationNames.CACHE_PURGE)
        try:
            return self._update_ops.purge_expired(self.policy.as_dict(), now)
        except _STORAGE_ERRORS as e:
            raise self._tier_error(LogOperationNames.CACHE_PURGE, e, ErrorCode.CACHE_WRITE_FAILED) from e

    def _clear(self) -> int:
        self._require_connection(LogOperationNames.CACHE_PURGE)
        try:
            return self._update_ops.clear()
        except _STORAGE_ERRORS as e:
            raise self._tier_error(LogOperationNames.CACHE_PURGE, e, ErrorCode.CACHE_WRITE_FAILED) from e

    def __len__(self) -> int:
        with self._lock:
            self._require_connection("count")
            try:
                return self._query_ops.count()
            except sqlite3.Error as e:
                raise self._tier_error("count", e, ErrorCode.CACHE_READ_FAILED) from e

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None
                logger.debug("Closed SQLite cache connection: %s", self.db_path)


__all__ = ["SQLiteCacheTier"]
