"""
Pytest configuration and shared fixtures for NameVault tests.

The remote service is replaced by ``FakeTransport``, which answers from an
in-memory directory, records every call and tracks how many calls are in
flight at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path

import orjson
import pytest

from namevault.core.statistics import StatisticsCollector
from namevault.services.cache.base import CacheTier
from namevault.services.cache.memory_cache import MemoryCacheTier
from namevault.services.cache.tiered_cache import TieredCache
from namevault.services.fallback import FallbackEscalator
from namevault.services.models import Record
from namevault.services.remote.client import RemoteResolveClient
from namevault.services.resolver import ResolverService
from namevault.services.ttl_policy import TTLPolicy
from namevault.services.validity_filter import ValidityFilter
from namevault.shared.errors import ErrorCode, ResolverNetworkError

TEST_BASE_URL = "https://esi.test/latest"


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """In-memory stand-in for the remote resolve endpoint.

    Args:
        directory: key -> (name, category) answered by the fake remote
        delay: Seconds each call sleeps before answering
    """

    def __init__(self, directory: dict[int, tuple[str, str]] | None = None, delay: float = 0.0) -> None:
        self.directory = dict(directory or {})
        self.delay = delay
        self.calls: list[list[int]] = []
        self.urls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self.fail_when: Callable[[list[int]], BaseException | None] | None = None
        self.raw_response: bytes | None = None

    async def post(self, url: str, body: bytes) -> bytes:
        keys = orjson.loads(body)
        self.calls.append(keys)
        self.urls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            error = self.fail_when(keys) if self.fail_when else None
            if error is not None:
                raise error
            if self.raw_response is not None:
                return self.raw_response
            return orjson.dumps(
                [
                    {"id": key, "name": self.directory[key][0], "category": self.directory[key][1]}
                    for key in keys
                    if key in self.directory
                ]
            )
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True

    @property
    def called_keys(self) -> list[int]:
        return [key for call in self.calls for key in call]

    @property
    def bulk_calls(self) -> list[list[int]]:
        return [call for call in self.calls if len(call) > 1]

    @property
    def single_calls(self) -> list[list[int]]:
        return [call for call in self.calls if len(call) == 1]


def network_down(code: ErrorCode = ErrorCode.NETWORK_ERROR) -> ResolverNetworkError:
    return ResolverNetworkError(code=code, message="remote unreachable")


def fail_batches_containing(*keys: int) -> Callable[[list[int]], BaseException | None]:
    """Fail every multi-key call containing one of ``keys``."""
    poisoned = set(keys)

    def rule(call: list[int]) -> BaseException | None:
        if len(call) > 1 and poisoned & set(call):
            return ResolverNetworkError(
                code=ErrorCode.API_SERVER_ERROR,
                message="bulk rejected",
                status=500,
            )
        return None

    return rule


def make_directory(keys: Iterable[int], category: str = "character") -> dict[int, tuple[str, str]]:
    return {key: (f"entity-{key}", category) for key in keys}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ttl_policy() -> TTLPolicy:
    return TTLPolicy()


@pytest.fixture
def statistics() -> StatisticsCollector:
    return StatisticsCollector()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(make_directory([1, 2, 3, 10, 20, 30, *range(100, 200)]))


@pytest.fixture
def memory_tier(ttl_policy: TTLPolicy, clock: FakeClock) -> MemoryCacheTier:
    return MemoryCacheTier(ttl_policy, max_entries=1_000, clock=clock)


@pytest.fixture
def remote_client(transport: FakeTransport, clock: FakeClock, statistics: StatisticsCollector) -> RemoteResolveClient:
    return RemoteResolveClient(
        transport,
        base_url=TEST_BASE_URL,
        rate_limit=10_000,
        rate_period=1.0,
        statistics=statistics,
        clock=clock,
    )


@pytest.fixture
def make_resolver(
    remote_client: RemoteResolveClient,
    ttl_policy: TTLPolicy,
    memory_tier: MemoryCacheTier,
    statistics: StatisticsCollector,
    clock: FakeClock,
) -> Callable[..., ResolverService]:
    """Factory building a resolver over the fake transport."""

    def _make(
        tiers: list[CacheTier] | None = None,
        max_batch_size: int = 1000,
        bulk_window: int = 4,
        fallback_window: int = 10,
        ranges: list[tuple[int, int]] | None = None,
    ) -> ResolverService:
        return ResolverService(
            cache=TieredCache([memory_tier] if tiers is None else tiers, statistics=statistics),
            escalator=FallbackEscalator(
                remote_client,
                bulk_window=bulk_window,
                fallback_window=fallback_window,
                statistics=statistics,
            ),
            policy=ttl_policy,
            validity_filter=ValidityFilter(ranges),
            max_batch_size=max_batch_size,
            statistics=statistics,
            clock=clock,
        )

    return _make


@pytest.fixture
def sample_record(clock: FakeClock) -> Record:
    return Record(key=30000142, name="Jita", category="solar_system", resolved_at=clock())


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"
