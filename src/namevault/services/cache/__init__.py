"""Cache tiers and the tier chain."""

from namevault.services.cache.base import CacheTier
from namevault.services.cache.file_cache import FileCacheTier
from namevault.services.cache.memory_cache import MemoryCacheTier
from namevault.services.cache.sqlite_cache import SQLiteCacheTier
from namevault.services.cache.tiered_cache import TieredCache, TierLookup

__all__ = [
    "CacheTier",
    "FileCacheTier",
    "MemoryCacheTier",
    "SQLiteCacheTier",
    "TierLookup",
    "TieredCache",
]
