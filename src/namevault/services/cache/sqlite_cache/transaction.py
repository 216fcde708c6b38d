"""Transaction helper for the SQLite cache tier."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class TransactionManager:
    """Explicit transactions over an autocommit connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Commit on success, roll back on exception.

        Example:
            >>> with transaction_manager.transaction():
            ...     insert_ops.insert_many(entries)
        """
        self.conn.execute("BEGIN IMMEDIATE")
        try:
            yield
        except BaseException:
            self.conn.execute("ROLLBACK")
            raise
        self.conn.execute("COMMIT")


__all__ = ["TransactionManager"]
