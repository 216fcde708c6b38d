"""Tests for FileCacheTier."""

from __future__ import annotations

import hashlib

import orjson
import pytest

from namevault.services.cache.file_cache import FileCacheTier
from namevault.services.cache.tiered_cache import TieredCache
from namevault.services.models import Record
from namevault.shared.constants import BASE_DAY, BASE_MINUTE
from namevault.shared.errors import CacheTierError, ErrorCode, InfrastructureError

pytestmark = pytest.mark.integration


@pytest.fixture
def file_tier(cache_dir, ttl_policy, clock) -> FileCacheTier:
    return FileCacheTier(cache_dir, ttl_policy, clock=clock)


def _document(cache_dir, key: int, ttl_class: str):
    key_hash = hashlib.sha256(str(key).encode("utf-8")).hexdigest()
    return cache_dir / ttl_class / f"{key_hash}.json"


class TestFileCacheTier:
    """Persistence and layout."""

    def test_round_trip_survives_reopen(self, cache_dir, ttl_policy, clock, sample_record) -> None:
        # Given
        FileCacheTier(cache_dir, ttl_policy, clock=clock).put(sample_record.key, sample_record, "names")

        # When
        reopened = FileCacheTier(cache_dir, ttl_policy, clock=clock)

        # Then
        assert reopened.get(sample_record.key, "names") == sample_record

    def test_document_layout(self, file_tier, cache_dir, sample_record, clock) -> None:
        file_tier.put(sample_record.key, sample_record, "names")

        document = orjson.loads(_document(cache_dir, sample_record.key, "names").read_bytes())

        assert document["name"] == "Jita"
        assert document["ttl_class"] == "names"
        assert document["stored_at"] == clock()

    def test_expired_document_is_a_miss(self, file_tier, sample_record, clock) -> None:
        file_tier.put(sample_record.key, sample_record, "status")

        clock.advance(5 * BASE_MINUTE + 1)

        assert file_tier.get(sample_record.key, "status") is None


class TestFileCacheCorruption:
    """Damaged documents are discarded."""

    def test_corrupted_document_is_deleted(self, file_tier, cache_dir, sample_record) -> None:
        # Given
        file_tier.put(sample_record.key, sample_record, "names")
        path = _document(cache_dir, sample_record.key, "names")
        path.write_bytes(b"{not json")

        # When
        result = file_tier.get(sample_record.key, "names")

        # Then
        assert result is None
        assert not path.exists()

    def test_document_for_another_key_is_ignored(self, file_tier, cache_dir, sample_record) -> None:
        # Given: key 1's document holds key 2's payload
        file_tier.put(2, Record(2, "two", "character", 0.0), "names")
        path = _document(cache_dir, 1, "names")
        path.write_bytes(_document(cache_dir, 2, "names").read_bytes())

        # When / Then
        assert file_tier.get(1, "names") is None

    def test_unreadable_document_raises_tier_error(self, file_tier, cache_dir, mocker) -> None:
        # Given
        file_tier.put(1, Record(1, "one", "character", 0.0), "names")
        mocker.patch("pathlib.Path.read_bytes", side_effect=PermissionError("denied"))

        # When / Then
        with pytest.raises(CacheTierError) as exc_info:
            file_tier.get(1, "names")
        assert exc_info.value.code == ErrorCode.CACHE_READ_FAILED
        assert exc_info.value.tier == "file"


class TestFileCacheMaintenance:
    def test_purge_on_startup(self, cache_dir, ttl_policy, clock) -> None:
        # Given
        tier = FileCacheTier(cache_dir, ttl_policy, clock=clock)
        tier.put(1, Record(1, "one", "character", 0.0), "status")
        tier.put(2, Record(2, "two", "character", 0.0), "names")
        clock.advance(BASE_DAY)

        # When
        FileCacheTier(cache_dir, ttl_policy, clock=clock, purge_on_startup=True)

        # Then
        assert not _document(cache_dir, 1, "status").exists()
        assert _document(cache_dir, 2, "names").exists()

    def test_clear(self, file_tier) -> None:
        file_tier.put_many({1: Record(1, "one", "character", 0.0)}, "names")
        file_tier.put_many({1: Record(1, "one", "character", 0.0)}, "status")

        assert file_tier.clear() == 2
        assert file_tier.get(1, "names") is None

    def test_uncreatable_directory(self, tmp_path, ttl_policy) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(InfrastructureError) as exc_info:
            FileCacheTier(blocker / "cache", ttl_policy)

        assert exc_info.value.code == ErrorCode.DIRECTORY_CREATION_FAILED

    def test_unencodable_entry_raises_tier_error(self, file_tier) -> None:
        # Given: a key wider than 64 bits, which orjson cannot encode
        record = Record(2**64, "huge", "character", 0.0)

        # When / Then
        with pytest.raises(CacheTierError) as exc_info:
            file_tier.put(2**64, record, "names")
        assert exc_info.value.code == ErrorCode.CACHE_SERIALIZATION_ERROR

    def test_purge_delete_failure_raises_tier_error(self, file_tier, clock, mocker) -> None:
        # Given: an expired document in a read-only directory
        file_tier.put(1, Record(1, "one", "character", 0.0), "status")
        clock.advance(BASE_DAY)
        mocker.patch("pathlib.Path.unlink", side_effect=PermissionError("read-only"))

        # When / Then
        with pytest.raises(CacheTierError) as exc_info:
            file_tier.purge_expired()
        assert exc_info.value.code == ErrorCode.CACHE_WRITE_FAILED

    def test_purge_delete_failure_is_skipped_by_chain(self, file_tier, clock, mocker) -> None:
        file_tier.put(1, Record(1, "one", "character", 0.0), "status")
        clock.advance(BASE_DAY)
        mocker.patch("pathlib.Path.unlink", side_effect=PermissionError("read-only"))

        assert TieredCache([file_tier]).purge_expired() == 0

    def test_purge_on_startup_survives_delete_failure(self, cache_dir, ttl_policy, clock, mocker) -> None:
        # Given
        FileCacheTier(cache_dir, ttl_policy, clock=clock).put(1, Record(1, "one", "character", 0.0), "status")
        clock.advance(BASE_DAY)
        mocker.patch("pathlib.Path.unlink", side_effect=PermissionError("read-only"))

        # When
        tier = FileCacheTier(cache_dir, ttl_policy, clock=clock, purge_on_startup=True)

        # Then
        assert tier.get(1, "status") is None
