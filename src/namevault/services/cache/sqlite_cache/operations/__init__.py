"""SQLite cache operations module.

Separate operation classes for querying, inserting, and deleting cache rows.
"""

from namevault.services.cache.sqlite_cache.operations.insert import InsertOperations
from namevault.services.cache.sqlite_cache.operations.query import QueryOperations
from namevault.services.cache.sqlite_cache.operations.update import UpdateOperations

__all__ = ["InsertOperations", "QueryOperations", "UpdateOperations"]
