"""Remote resolve client.

Builds the bulk request body, applies the async rate limiter, calls the
transport and decodes the response into :class:`Record` objects. The
client never retries; retry policy belongs to the fallback escalator.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

import orjson
from aiolimiter import AsyncLimiter
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from namevault.core.statistics import StatisticsCollector
from namevault.services.models import Record
from namevault.services.remote.transport import Transport
from namevault.shared.constants import LogContextKeys, LogOperationNames, NetworkConfig
from namevault.shared.errors import (
    ErrorCode,
    ErrorContext,
    RemoteResponseError,
    ResolverNetworkError,
)

logger = logging.getLogger(__name__)


class RemoteEntity(BaseModel):
    """One element of the bulk resolve response."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    name: str
    category: str


_RESPONSE_ADAPTER = TypeAdapter(list[RemoteEntity])


class RemoteResolveClient:
    """Rate-limited client for the bulk resolve endpoint.

    Args:
        transport: Transport performing the HTTP POST
        base_url: API base URL, endpoints are appended to it
        rate_limit: Requests allowed per ``rate_period``
        rate_period: Rate limit window in seconds
        statistics: Optional statistics collector
        clock: Source of UTC epoch seconds for ``resolved_at``

    Example:
        >>> client = RemoteResolveClient(AiohttpTransport(), "https://esi.evetech.net/latest")
        >>> records = await client.resolve("/universe/names/", [95465499, 30000142])
    """

    def __init__(
        self,
        transport: Transport,
        base_url: str = NetworkConfig.DEFAULT_BASE_URL,
        rate_limit: float = NetworkConfig.DEFAULT_RATE_LIMIT,
        rate_period: float = NetworkConfig.DEFAULT_RATE_PERIOD,
        statistics: StatisticsCollector | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.transport = transport
        self.base_url = base_url.rstrip("/")
        self.statistics = statistics
        self.clock = clock or time.time
        self._rate_limiter = AsyncLimiter(rate_limit, rate_period)

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def resolve(self, endpoint: str, keys: Sequence[int]) -> dict[int, Record]:
        """Resolve ``keys`` with one POST.

        Ids in the response that were not requested are ignored; requested
        keys missing from the response are simply absent from the result.

        Args:
            endpoint: Endpoint path of the profile
            keys: Keys to resolve

        Returns:
            Records by key

        Raises:
            ResolverNetworkError: If the transport fails
            RemoteResponseError: If the body is not a valid response payload
        """
        url = self.url_for(endpoint)
        body = orjson.dumps(list(keys))
        started = time.perf_counter()

        try:
            async with self._rate_limiter:
                raw = await self.transport.post(url, body)
        except ResolverNetworkError as e:
            self._record_call(endpoint, started, success=False)
            if self.statistics is not None and e.code == ErrorCode.API_RATE_LIMIT:
                self.statistics.record_rate_limit_hit()
            raise

        try:
            entities = self._decode(raw, url, len(keys))
        except RemoteResponseError:
            self._record_call(endpoint, started, success=False)
            raise

        self._record_call(endpoint, started, success=True)
        requested = set(keys)
        resolved_at = self.clock()
        return {
            entity.id: Record(
                key=entity.id,
                name=entity.name,
                category=entity.category,
                resolved_at=resolved_at,
            )
            for entity in entities
            if entity.id in requested
        }

    def _decode(self, raw: bytes, url: str, key_count: int) -> list[RemoteEntity]:
        """Decode the whole payload; any bad element fails the call."""
        try:
            return _RESPONSE_ADAPTER.validate_python(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise RemoteResponseError(
                code=ErrorCode.API_INVALID_RESPONSE,
                message=f"Undecodable response from {url}: {e!s}",
                context=ErrorContext(
                    operation=LogOperationNames.DECODE_RESPONSE,
                    additional_data={
                        LogContextKeys.ENDPOINT: url,
                        LogContextKeys.KEY_COUNT: key_count,
                        "body_size": len(raw),
                    },
                ),
                original_error=e,
            ) from e

    def _record_call(self, endpoint: str, started: float, *, success: bool) -> None:
        if self.statistics is not None:
            self.statistics.record_api_call(
                endpoint,
                success=success,
                duration=time.perf_counter() - started,
            )

    async def close(self) -> None:
        await self.transport.close()


__all__ = ["RemoteEntity", "RemoteResolveClient"]
