"""
Cache Configuration Constants

This module provides centralized cache configuration constants: TTL
classes, default freshness windows and tier names.
"""

# Base time units for TTL calculations
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE
BASE_DAY = 24 * BASE_HOUR


class TTLClasses:
    """Built-in TTL class names."""

    NAMES = "names"
    MARKET_OFFERS = "market_offers"
    STATUS = "status"


class CacheConfig:
    """Cache tier defaults."""

    # Default freshness windows per TTL class
    DEFAULT_TTL_SECONDS: dict[str, int] = {
        TTLClasses.NAMES: 30 * BASE_DAY,  # names practically never change
        TTLClasses.MARKET_OFFERS: 6 * BASE_HOUR,
        TTLClasses.STATUS: 5 * BASE_MINUTE,
    }

    # Tier names, also the precedence order when all are enabled
    TIER_MEMORY = "memory"
    TIER_FILE = "file"
    TIER_SQLITE = "sqlite"
    DEFAULT_TIERS: tuple[str, ...] = (TIER_MEMORY, TIER_FILE, TIER_SQLITE)

    # Memory tier
    MEMORY_MAX_ENTRIES = 50_000

    # File and SQLite tier locations
    DEFAULT_DIRECTORY = "cache"
    FILE_CACHE_SUBDIR = "entities"
    SQLITE_FILENAME = "namevault_cache.db"
    FILE_EXTENSION = ".json"

    # SQLite keeps bound parameters per statement under this bound
    SQLITE_MAX_VARIABLES = 900

    # Range of a SQLite INTEGER column; other keys are never bound
    SQLITE_MIN_INTEGER = -(2**63)
    SQLITE_MAX_INTEGER = 2**63 - 1


class CacheValidationConstants:
    """Cache validation constants."""

    SHA256_HASH_LENGTH = 64
    HASH_PREFIX_LOG_LENGTH = 16
