"""Cache configuration model.

This module contains the cache configuration model: which tiers are
enabled and in which order, where they live, and the TTL per class.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from namevault.shared.constants import CacheConfig


class CacheSettings(BaseModel):
    """Cache configuration.

    ``enabled_tiers`` is also the precedence order: the first tier is
    consulted first and receives backfilled entries from the others.
    """

    enabled_tiers: list[str] = Field(
        default_factory=lambda: list(CacheConfig.DEFAULT_TIERS),
        description="Ordered cache tiers (memory, file, sqlite)",
    )
    memory_max_entries: int = Field(
        default=CacheConfig.MEMORY_MAX_ENTRIES,
        gt=0,
        description="Maximum entries held by the memory tier",
    )
    file_cache_dir: Path = Field(
        default=Path(CacheConfig.DEFAULT_DIRECTORY) / CacheConfig.FILE_CACHE_SUBDIR,
        description="Directory of the file tier",
    )
    sqlite_path: Path = Field(
        default=Path(CacheConfig.DEFAULT_DIRECTORY) / CacheConfig.SQLITE_FILENAME,
        description="Database file of the SQLite tier",
    )
    purge_on_startup: bool = Field(
        default=True,
        description="Delete expired entries when a persistent tier opens",
    )
    ttl_seconds: dict[str, int] = Field(
        default_factory=lambda: dict(CacheConfig.DEFAULT_TTL_SECONDS),
        description="Freshness window per TTL class",
    )

    @field_validator("enabled_tiers")
    @classmethod
    def validate_tiers(cls, value: list[str]) -> list[str]:
        """Reject unknown or repeated tier names."""
        normalized = [tier.strip().lower() for tier in value]
        unknown = sorted(set(normalized) - set(CacheConfig.DEFAULT_TIERS))
        if unknown:
            msg = f"Unknown cache tiers: {unknown}"
            raise ValueError(msg)
        if len(set(normalized)) != len(normalized):
            msg = f"Cache tiers must not repeat: {normalized}"
            raise ValueError(msg)
        return normalized

    @field_validator("ttl_seconds")
    @classmethod
    def validate_ttls(cls, value: dict[str, int]) -> dict[str, int]:
        """TTLs must be positive."""
        for ttl_class, seconds in value.items():
            if seconds <= 0:
                msg = f"TTL for '{ttl_class}' must be positive, got {seconds}"
                raise ValueError(msg)
        return value


__all__ = ["CacheSettings"]
