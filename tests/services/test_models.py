"""Tests for resolution domain models."""

from __future__ import annotations

import dataclasses

import pytest

from namevault.services.models import (
    CacheEntry,
    Record,
    ResolutionTask,
    StoredRecord,
    TaskMode,
    TaskOutcome,
    make_placeholder,
)


class TestRecord:
    def test_records_are_immutable(self, sample_record: Record) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_record.name = "Amarr"  # type: ignore[misc]

    def test_placeholder(self) -> None:
        record = make_placeholder(42, now=12.5)

        assert record == Record(key=42, name="42", category="unknown", resolved_at=12.5, placeholder=True)


class TestCacheEntry:
    def test_expiry_is_strict(self, sample_record: Record) -> None:
        entry = CacheEntry(key=sample_record.key, record=sample_record, stored_at=100.0, ttl_class="names")

        assert entry.is_expired(ttl_seconds=50, now=150.0) is False
        assert entry.is_expired(ttl_seconds=50, now=150.5) is True

    def test_stored_record_preserves_entry(self, sample_record: Record) -> None:
        entry = CacheEntry(key=sample_record.key, record=sample_record, stored_at=99.0, ttl_class="status")

        stored = StoredRecord.model_validate(StoredRecord.from_entry(entry).model_dump())

        assert stored.to_entry() == entry


class TestTasks:
    def test_bulk_and_single_tasks(self) -> None:
        assert ResolutionTask.bulk([1, 2]) == ResolutionTask(TaskMode.BULK, (1, 2))
        assert ResolutionTask.single(7).keys == (7,)

    def test_outcome_success_flags(self) -> None:
        task = ResolutionTask.single(1)

        assert TaskOutcome(task=task, records={}).succeeded
        assert not TaskOutcome(task=task, error=ValueError("x")).succeeded
        assert not TaskOutcome(task=task, cancelled=True).succeeded
