"""
Statistics Collection Module

This module collects resolution statistics for the NameVault engine:
per-tier cache hits and misses, remote call outcomes, escalations and
synthesized placeholders.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ResolutionMetrics:
    """Container for resolution metrics."""

    # Cache metrics
    tier_hits: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    tier_misses: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    tier_errors: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    # Remote metrics
    api_calls: int = 0
    api_errors: int = 0
    rate_limit_hits: int = 0
    api_time: float = 0.0

    # Resolution metrics
    resolve_calls: int = 0
    keys_requested: int = 0
    escalated_batches: int = 0
    placeholders: int = 0

    @property
    def cache_hits(self) -> int:
        return sum(self.tier_hits.values())

    @property
    def cache_misses(self) -> int:
        return sum(self.tier_misses.values())


class StatisticsCollector:
    """Central aggregator for resolution metrics.

    Safe to share between the event loop and worker threads; every
    mutation happens under one lock.
    """

    def __init__(self) -> None:
        """Initialize the statistics collector."""
        self.metrics = ResolutionMetrics()
        self.session_start = datetime.now(timezone.utc)
        self._lock = threading.Lock()

        logger.debug("StatisticsCollector initialized")

    def record_cache_hit(self, tier: str, count: int = 1) -> None:
        """Record cache hits.

        Args:
            tier: Name of the tier that answered
            count: Number of keys served
        """
        with self._lock:
            self.metrics.tier_hits[tier] += count

    def record_cache_miss(self, tier: str, count: int = 1) -> None:
        """Record cache misses.

        Args:
            tier: Name of the tier that missed
            count: Number of keys missed
        """
        with self._lock:
            self.metrics.tier_misses[tier] += count

    def record_cache_error(self, tier: str) -> None:
        """Record a tier I/O failure."""
        with self._lock:
            self.metrics.tier_errors[tier] += 1

    def record_api_call(
        self,
        endpoint: str,
        success: bool,
        duration: float | None = None,
    ) -> None:
        """Record a remote call.

        Args:
            endpoint: API endpoint called
            success: Whether the call was successful
            duration: Duration of the call in seconds
        """
        with self._lock:
            self.metrics.api_calls += 1
            if not success:
                self.metrics.api_errors += 1
            if duration is not None:
                self.metrics.api_time += duration

        logger.debug(
            "Recorded API call: %s, success=%s, duration=%s",
            endpoint,
            success,
            duration,
        )

    def record_rate_limit_hit(self) -> None:
        """Record a rate limit response."""
        with self._lock:
            self.metrics.rate_limit_hits += 1

    def record_resolve(self, key_count: int) -> None:
        """Record one resolve call over ``key_count`` distinct keys."""
        with self._lock:
            self.metrics.resolve_calls += 1
            self.metrics.keys_requested += key_count

    def record_escalation(self, batch_count: int = 1) -> None:
        """Record batches escalated to single-key resolution."""
        with self._lock:
            self.metrics.escalated_batches += batch_count

    def record_placeholders(self, count: int) -> None:
        """Record synthesized placeholder records."""
        with self._lock:
            self.metrics.placeholders += count

    def get_cache_hit_ratio(self) -> float:
        """Get the current cache hit ratio.

        Returns:
            Cache hit ratio as a percentage (0.0 to 100.0)
        """
        with self._lock:
            hits = self.metrics.cache_hits
            total_requests = hits + self.metrics.cache_misses
        if total_requests == 0:
            return 0.0
        return (hits / total_requests) * 100.0

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of all collected statistics.

        Returns:
            Dictionary containing summary statistics
        """
        session_duration = (
            datetime.now(timezone.utc) - self.session_start
        ).total_seconds()
        hit_ratio = self.get_cache_hit_ratio()

        with self._lock:
            metrics = self.metrics
            return {
                "session_info": {
                    "start_time": self.session_start.isoformat(),
                    "duration_seconds": session_duration,
                },
                "cache": {
                    "hits": dict(metrics.tier_hits),
                    "misses": dict(metrics.tier_misses),
                    "errors": dict(metrics.tier_errors),
                    "hit_ratio": hit_ratio,
                },
                "api": {
                    "calls": metrics.api_calls,
                    "errors": metrics.api_errors,
                    "rate_limit_hits": metrics.rate_limit_hits,
                    "total_time": metrics.api_time,
                },
                "resolution": {
                    "resolve_calls": metrics.resolve_calls,
                    "keys_requested": metrics.keys_requested,
                    "escalated_batches": metrics.escalated_batches,
                    "placeholders": metrics.placeholders,
                },
            }

    def reset(self) -> None:
        """Reset all collected statistics."""
        with self._lock:
            self.metrics = ResolutionMetrics()
            self.session_start = datetime.now(timezone.utc)
        logger.debug("Statistics reset")


__all__ = ["ResolutionMetrics", "StatisticsCollector"]
