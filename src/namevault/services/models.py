"""Resolution domain models.

This module defines the immutable value types that flow through the
resolution pipeline: resolved records, cache entries, batches and the
task/outcome pair produced by the scheduler.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from namevault.shared.constants import ResolverDefaults

#: Ordered tuple of distinct keys destined for one bulk call.
Batch = tuple[int, ...]


@dataclass(frozen=True)
class Record:
    """Resolved payload for one key.

    Records are never mutated; a later fetch replaces the whole record.

    Attributes:
        key: Remote entity identifier
        name: Display name
        category: Entity category reported by the remote
        resolved_at: UTC epoch seconds when the record was produced
        placeholder: True when synthesized locally instead of fetched
    """

    key: int
    name: str
    category: str
    resolved_at: float
    placeholder: bool = False


def make_placeholder(key: int, now: float | None = None) -> Record:
    """Synthesize the stand-in record for a key nobody could resolve.

    Example:
        >>> make_placeholder(42, now=0.0)
        Record(key=42, name='42', category='unknown', resolved_at=0.0, placeholder=True)
    """
    return Record(
        key=key,
        name=str(key),
        category=ResolverDefaults.PLACEHOLDER_CATEGORY,
        resolved_at=time.time() if now is None else now,
        placeholder=True,
    )


@dataclass(frozen=True)
class CacheEntry:
    """A record as stored by a cache tier.

    Attributes:
        key: Remote entity identifier
        record: Stored record
        stored_at: UTC epoch seconds when the entry was first written
        ttl_class: Freshness class, also the storage namespace
    """

    key: int
    record: Record
    stored_at: float
    ttl_class: str

    def is_expired(self, ttl_seconds: float, now: float) -> bool:
        """Expired iff strictly older than the class TTL."""
        return now - self.stored_at > ttl_seconds


class StoredRecord(BaseModel):
    """Serialized form of a CacheEntry used by the persistent tiers."""

    model_config = ConfigDict(frozen=True)

    key: int = Field(..., description="Remote entity identifier")
    name: str = Field(..., description="Display name")
    category: str = Field(..., description="Entity category")
    resolved_at: float = Field(..., description="When the record was produced")
    placeholder: bool = Field(default=False)
    stored_at: float = Field(..., description="When the entry was first cached")
    ttl_class: str = Field(..., description="Freshness class of the entry")

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> StoredRecord:
        record = entry.record
        return cls(
            key=entry.key,
            name=record.name,
            category=record.category,
            resolved_at=record.resolved_at,
            placeholder=record.placeholder,
            stored_at=entry.stored_at,
            ttl_class=entry.ttl_class,
        )

    def to_entry(self) -> CacheEntry:
        return CacheEntry(
            key=self.key,
            record=Record(
                key=self.key,
                name=self.name,
                category=self.category,
                resolved_at=self.resolved_at,
                placeholder=self.placeholder,
            ),
            stored_at=self.stored_at,
            ttl_class=self.ttl_class,
        )


class TaskMode(str, Enum):
    """Dispatch mode of a resolution task."""

    BULK = "bulk"
    SINGLE = "single"


@dataclass(frozen=True)
class ResolutionTask:
    """Unit of work: one batch (bulk mode) or one key (single mode)."""

    mode: TaskMode
    keys: Batch

    @classmethod
    def bulk(cls, batch: Batch) -> ResolutionTask:
        return cls(TaskMode.BULK, tuple(batch))

    @classmethod
    def single(cls, key: int) -> ResolutionTask:
        return cls(TaskMode.SINGLE, (key,))


@dataclass
class TaskOutcome:
    """Result of running one task.

    ``records`` holds whatever the worker returned; ``error`` is set when
    the worker raised. A task that never started because the run was
    cancelled has ``cancelled=True`` and no error.
    """

    task: Any
    records: Any = None
    error: BaseException | None = None
    cancelled: bool = False
    duration: float = field(default=0.0, compare=False)

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.cancelled


__all__ = [
    "Batch",
    "CacheEntry",
    "Record",
    "ResolutionTask",
    "StoredRecord",
    "TaskMode",
    "TaskOutcome",
    "make_placeholder",
]
