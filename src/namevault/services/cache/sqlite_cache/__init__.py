"""SQLite cache tier with modular operations.

Separated concerns for schema, query, insert, delete and transaction
handling.
"""

from namevault.services.cache.sqlite_cache.cache_db import SQLiteCacheTier

__all__ = ["SQLiteCacheTier"]
