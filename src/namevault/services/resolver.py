"""Resolver service.

The facade composing the tier chain, the validity filter, the batch
splitter and the fallback escalator. ``resolve`` always returns one record
per distinct requested key; keys nobody could answer get a placeholder.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from namevault.core.statistics import StatisticsCollector
from namevault.services.batch_splitter import split
from namevault.services.cache.tiered_cache import TieredCache
from namevault.services.fallback import FallbackEscalator
from namevault.services.models import Record, make_placeholder
from namevault.services.remote.profiles import NAMES, ResolverProfile
from namevault.services.scheduler import CancelSignal
from namevault.services.ttl_policy import TTLPolicy
from namevault.services.validity_filter import ValidityFilter
from namevault.shared.constants import LogContextKeys, LogOperationNames, ResolverDefaults
from namevault.shared.errors import (
    DomainError,
    ErrorCode,
    ErrorContext,
    ResolutionInvariantError,
    ResolutionUnavailableError,
)
from namevault.shared.logging import log_operation_error, log_operation_start, log_operation_success

logger = logging.getLogger(__name__)


def _dedupe_keys(keys: Iterable[Any]) -> list[int]:
    """Validate keys and drop duplicates, keeping first-seen order.

    Raises:
        DomainError: If any key is not an int (bools are rejected too)
    """
    unique: dict[int, None] = {}
    for key in keys:
        if isinstance(key, bool) or not isinstance(key, int):
            raise DomainError(
                code=ErrorCode.INVALID_KEY,
                message=f"Keys must be integers, got {type(key).__name__}: {key!r}",
                context=ErrorContext(
                    operation=LogOperationNames.RESOLVE,
                    additional_data={LogContextKeys.ERROR_TYPE: type(key).__name__},
                ),
            )
        unique[key] = None
    return list(unique)


class ResolverService:
    """Resolve integer keys to records through cache tiers and the remote.

    Algorithm per call:

    1. validate and deduplicate keys;
    2. look the keys up in the tier chain;
    3. placeholder every missed key the validity filter rejects;
    4. split the rest into batches and run them through the escalator,
       writing each call's records to every tier as it completes;
    5. merge cached, remote and placeholder records and check the result
       covers exactly the requested keys.

    Args:
        cache: Tier chain
        escalator: Fallback escalator wrapping the remote client
        policy: TTL policy
        validity_filter: Filter applied before network dispatch
        profile: Data class served by this instance
        max_batch_size: Upper bound on keys per bulk call
        statistics: Optional statistics collector
        clock: Source of UTC epoch seconds for placeholders

    Example:
        >>> service = container.resolver_service()
        >>> names = await service.resolve([95465499, 30000142, 95465499])
        >>> names[30000142].name
        'Jita'
    """

    def __init__(
        self,
        cache: TieredCache,
        escalator: FallbackEscalator,
        policy: TTLPolicy,
        validity_filter: ValidityFilter | None = None,
        profile: ResolverProfile = NAMES,
        max_batch_size: int = ResolverDefaults.MAX_BATCH_SIZE,
        statistics: StatisticsCollector | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if max_batch_size < 1:
            raise DomainError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"max_batch_size must be at least 1, got {max_batch_size}",
                context=ErrorContext(operation="resolver_init"),
            )
        self.cache = cache
        self.escalator = escalator
        self.policy = policy
        self.profile = profile
        self.validity_filter = (
            ValidityFilter(profile.addressable_ranges)
            if profile.addressable_ranges is not None
            else validity_filter or ValidityFilter()
        )
        self.max_batch_size = max_batch_size
        self.statistics = statistics
        self.clock = clock or time.time
        self.policy.validate(profile.ttl_class)

    def with_profile(self, profile: ResolverProfile) -> ResolverService:
        """A service for another data class sharing tiers, client and limits."""
        return ResolverService(
            cache=self.cache,
            escalator=self.escalator,
            policy=self.policy,
            validity_filter=self.validity_filter,
            profile=profile,
            max_batch_size=self.max_batch_size,
            statistics=self.statistics,
            clock=self.clock,
        )

    async def resolve(
        self,
        keys: Iterable[int],
        ttl_class: str | None = None,
        cancel_event: CancelSignal | None = None,
    ) -> dict[int, Record]:
        """Resolve every distinct key in ``keys``.

        Args:
            keys: Keys to resolve; duplicates are allowed
            ttl_class: TTL class namespace, defaults to the profile's
            cancel_event: Optional cooperative cancellation signal; keys not
                attempted before it was set come back as placeholders

        Returns:
            One record per distinct key, in first-seen order

        Raises:
            DomainError: If a key is not an integer or the TTL class is unknown
            ResolutionUnavailableError: If no cache tier and no remote call worked
            ResolutionInvariantError: If the merged result does not cover the input
        """
        unique = _dedupe_keys(keys)
        ttl_class = self.policy.validate(ttl_class or self.profile.ttl_class)
        if not unique:
            return {}

        started = time.perf_counter()
        context = {
            LogContextKeys.KEY_COUNT: len(unique),
            LogContextKeys.TTL_CLASS: ttl_class,
            "profile": self.profile.name,
        }
        log_operation_start(logger, LogOperationNames.RESOLVE, context)
        if self.statistics is not None:
            self.statistics.record_resolve(len(unique))

        lookup = self.cache.lookup(unique, ttl_class)
        addressable, unaddressable = self.validity_filter.partition(sorted(lookup.misses))

        def write_back(records: Mapping[int, Record]) -> None:
            self.cache.put_many(records, ttl_class)

        report = await self.escalator.escalate(
            split(addressable, self.max_batch_size),
            self.profile.endpoint,
            cancel_event=cancel_event,
            on_records=write_back,
        )

        tiers_unreachable = len(lookup.failed_tiers) == len(self.cache)
        if tiers_unreachable and report.offline:
            error = ResolutionUnavailableError(
                code=ErrorCode.RESOLUTION_UNAVAILABLE,
                message="No cache tier and no remote service reachable",
                context=ErrorContext(
                    operation=LogOperationNames.RESOLVE,
                    additional_data={
                        **context,
                        "failed_tiers": ",".join(lookup.failed_tiers),
                        "remote_calls": report.remote_calls,
                    },
                ),
                original_error=report.call_errors[-1] if report.call_errors else None,
            )
            log_operation_error(logger=logger, error=error)
            raise error

        now = self.clock()
        placeholder_keys = set(unaddressable) | report.unresolved_keys
        merged: dict[int, Record] = {**lookup.hits, **report.records}
        for key in placeholder_keys:
            merged.setdefault(key, make_placeholder(key, now))

        if merged.keys() != set(unique):
            missing = set(unique) - merged.keys()
            extra = merged.keys() - set(unique)
            raise ResolutionInvariantError(
                code=ErrorCode.RESOLUTION_INVARIANT_VIOLATED,
                message=f"Result covers {len(merged)} keys, expected {len(unique)}",
                context=ErrorContext(
                    operation=LogOperationNames.RESOLVE,
                    additional_data={"missing": len(missing), "extra": len(extra)},
                ),
            )

        if self.statistics is not None:
            self.statistics.record_placeholders(len(placeholder_keys))

        log_operation_success(
            logger=logger,
            operation=LogOperationNames.RESOLVE,
            duration_ms=(time.perf_counter() - started) * 1000,
            result_info={
                "cached": len(lookup.hits),
                "resolved": len(report.records),
                "placeholders": len(placeholder_keys),
                "escalated_batches": len(report.escalated_batches),
            },
            context=context,
        )
        return {key: merged[key] for key in unique}

    async def resolve_one(
        self,
        key: int,
        ttl_class: str | None = None,
        cancel_event: CancelSignal | None = None,
    ) -> Record:
        """Resolve a single key."""
        result = await self.resolve([key], ttl_class, cancel_event)
        return result[key]

    def purge_expired(self) -> int:
        """Eagerly drop expired entries from every tier."""
        return self.cache.purge_expired()

    async def close(self) -> None:
        """Close the remote client and every cache tier."""
        try:
            await self.escalator.client.close()
        finally:
            self.cache.close()


__all__ = ["ResolverService"]
