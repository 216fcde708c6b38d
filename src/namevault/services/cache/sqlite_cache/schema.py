"""Schema management for the SQLite cache tier.

The tier owns a single table; there are no migrations beyond creating it.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

TABLE_NAME = "resolved_entities"
SCHEMA_VERSION = 1


class SchemaManager:
    """Creates and inspects the cache schema."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize schema manager.

        Args:
            conn: SQLite database connection
        """
        self.conn = conn

    def get_current_version(self) -> int:
        """Get current schema version (0 if the schema was never created)."""
        cursor = self.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
        )
        if cursor.fetchone() is None:
            return 0

        cursor = self.conn.execute("SELECT MAX(version) FROM schema_version")
        row = cursor.fetchone()
        return row[0] if row and row[0] is not None else 0

    def create_tables(self) -> None:
        """Create the cache table and its indexes if missing."""
        schema_sql = f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            key INTEGER NOT NULL,
            ttl_class TEXT NOT NULL,
            payload BLOB NOT NULL,
            stored_at REAL NOT NULL,
            PRIMARY KEY (key, ttl_class),
            CHECK (length(ttl_class) > 0)
        );

        CREATE INDEX IF NOT EXISTS idx_{TABLE_NAME}_class_stored
            ON {TABLE_NAME}(ttl_class, stored_at);

        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP NOT NULL
        );
        """

        self.conn.executescript(schema_sql)
        if self.get_current_version() < SCHEMA_VERSION:
            self.conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            logger.info("Created database schema (v%d)", SCHEMA_VERSION)


__all__ = ["SCHEMA_VERSION", "TABLE_NAME", "SchemaManager"]
