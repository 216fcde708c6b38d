"""Base operation class for SQLite cache operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from namevault.shared.constants import CacheConfig

if TYPE_CHECKING:
    import sqlite3

logger = logging.getLogger(__name__)


class BaseOperation:
    """Base class for cache operations with shared functionality."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize base operation.

        Args:
            conn: SQLite database connection
        """
        self.conn = conn

    @staticmethod
    def _chunks(values: Sequence[int]) -> Iterator[Sequence[int]]:
        """Split ``values`` so each ``IN (...)`` stays below SQLite's variable limit."""
        size = CacheConfig.SQLITE_MAX_VARIABLES
        for start in range(0, len(values), size):
            yield values[start : start + size]
