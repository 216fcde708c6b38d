"""File-based cache tier.

One JSON document per entry, laid out as::

    <cache_dir>/<ttl_class>/<sha256(key)>.json

Documents are ``StoredRecord`` models serialized with orjson. Corrupted
documents are deleted and reported as misses.
"""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path

import orjson
from pydantic import ValidationError

from namevault.services.cache.base import CacheTier, Clock
from namevault.services.models import CacheEntry, StoredRecord
from namevault.services.ttl_policy import TTLPolicy
from namevault.shared.constants import CacheConfig, CacheValidationConstants, LogOperationNames
from namevault.shared.errors import (
    CacheTierError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    create_cache_tier_error,
)
from namevault.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)


class FileCacheTier(CacheTier):
    """JSON-file cache with one subdirectory per TTL class.

    Args:
        cache_dir: Base directory; created if missing
        policy: TTL policy
        clock: Source of UTC epoch seconds
        purge_on_startup: Delete expired documents during initialization

    Raises:
        InfrastructureError: If the cache directory cannot be created
    """

    name = CacheConfig.TIER_FILE

    def __init__(
        self,
        cache_dir: Path | str,
        policy: TTLPolicy,
        clock: Clock | None = None,
        *,
        purge_on_startup: bool = False,
    ) -> None:
        super().__init__(policy, clock)
        self.cache_dir = Path(cache_dir)
        context = ErrorContext(
            operation=LogOperationNames.INITIALIZE_CACHE,
            additional_data={"tier": self.name, "cache_dir": str(self.cache_dir)},
        )

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = InfrastructureError(
                code=ErrorCode.DIRECTORY_CREATION_FAILED,
                message=f"Failed to initialize cache directory: {self.cache_dir}",
                context=context,
                original_error=e,
            )
            log_operation_error(logger=logger, error=error)
            raise error from e

        if purge_on_startup:
            try:
                purged_count = self.purge_expired()
            except CacheTierError as e:
                log_operation_error(logger=logger, error=e, level=logging.WARNING)
            else:
                if purged_count > 0:
                    logger.info("Cleaned up %d expired cache files on startup", purged_count)

        log_operation_success(
            logger=logger,
            operation=LogOperationNames.INITIALIZE_CACHE,
            duration_ms=0,
            context=context,
        )

    def _file_path(self, key: int, ttl_class: str) -> Path:
        """Path of the document holding ``key`` under ``ttl_class``."""
        key_hash = hashlib.sha256(str(key).encode("utf-8")).hexdigest()
        return self.cache_dir / ttl_class / f"{key_hash}{CacheConfig.FILE_EXTENSION}"

    def _read_document(self, path: Path) -> CacheEntry | None:
        """Read one document; None if missing or corrupted.

        Raises:
            CacheTierError: If the file exists but cannot be read
        """
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise create_cache_tier_error(
                tier=self.name,
                message=f"Failed to read cache file: {e}",
                code=ErrorCode.CACHE_READ_FAILED,
                operation=LogOperationNames.CACHE_GET,
                file_path=str(path),
                original_error=e,
            ) from e

        try:
            return StoredRecord.model_validate(orjson.loads(raw)).to_entry()
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.warning(
                "Corrupted cache file %s...: %s",
                path.stem[: CacheValidationConstants.HASH_PREFIX_LOG_LENGTH],
                e,
            )
            try:
                path.unlink(missing_ok=True)
            except OSError as unlink_error:
                logger.warning("Failed to delete corrupted cache file %s: %s", path, unlink_error)
            return None

    def _load(self, keys: set[int], ttl_class: str) -> dict[int, CacheEntry]:
        found: dict[int, CacheEntry] = {}
        for key in keys:
            entry = self._read_document(self._file_path(key, ttl_class))
            # A document whose payload disagrees with its location is corrupt.
            if entry is not None and entry.key == key and entry.ttl_class == ttl_class:
                found[key] = entry
        return found

    def _store(self, entries: list[CacheEntry]) -> None:
        for entry in entries:
            path = self._file_path(entry.key, entry.ttl_class)
            tmp_path = path.with_suffix(".tmp")
            try:
                payload = orjson.dumps(StoredRecord.from_entry(entry).model_dump())
            except (orjson.JSONEncodeError, OverflowError, ValueError) as e:
                raise create_cache_tier_error(
                    tier=self.name,
                    message=f"Failed to encode cache entry for key {entry.key}: {e}",
                    code=ErrorCode.CACHE_SERIALIZATION_ERROR,
                    operation=LogOperationNames.CACHE_PUT,
                    file_path=str(path),
                    original_error=e,
                ) from e
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_bytes(payload)
                os.replace(tmp_path, path)
            except OSError as e:
                raise create_cache_tier_error(
                    tier=self.name,
                    message=f"Failed to write cache file for key {entry.key}: {e}",
                    code=ErrorCode.CACHE_WRITE_FAILED,
                    operation=LogOperationNames.CACHE_PUT,
                    file_path=str(path),
                    original_error=e,
                ) from e

    def _documents(self) -> list[Path]:
        try:
            return sorted(self.cache_dir.glob(f"*/*{CacheConfig.FILE_EXTENSION}"))
        except OSError as e:
            raise create_cache_tier_error(
                tier=self.name,
                message=f"Failed to list cache directory: {e}",
                operation=LogOperationNames.CACHE_PURGE,
                file_path=str(self.cache_dir),
                original_error=e,
            ) from e

    def _purge(self, now: float) -> int:
        purged = 0
        for path in self._documents():
            entry = self._read_document(path)
            if entry is None:
                continue
            if self._is_stale(entry, now):
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    raise create_cache_tier_error(
                        tier=self.name,
                        message=f"Failed to delete expired cache file: {e}",
                        code=ErrorCode.CACHE_WRITE_FAILED,
                        operation=LogOperationNames.CACHE_PURGE,
                        file_path=str(path),
                        original_error=e,
                    ) from e
                purged += 1
        return purged

    def _clear(self) -> int:
        cleared = 0
        for path in self._documents():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise create_cache_tier_error(
                    tier=self.name,
                    message=f"Failed to delete cache file: {e}",
                    code=ErrorCode.CACHE_WRITE_FAILED,
                    operation=LogOperationNames.CACHE_PURGE,
                    file_path=str(path),
                    original_error=e,
                ) from e
            cleared += 1
        return cleared


__all__ = ["FileCacheTier"]
