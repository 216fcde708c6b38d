"""HTTP transport for the remote resolve service.

The resolver only needs ``post(url, body) -> bytes``. ``AiohttpTransport``
implements that with one shared ``aiohttp.ClientSession`` and maps every
failure onto :class:`ResolverNetworkError`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

import aiohttp

from namevault.shared.constants import HTTPStatusCodes, LogContextKeys, LogOperationNames, NetworkConfig
from namevault.shared.errors import ErrorCode, ErrorContext, ResolverNetworkError
from namevault.shared.logging import log_api_call

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Minimal async POST primitive."""

    async def post(self, url: str, body: bytes) -> bytes:
        """POST ``body`` to ``url`` and return the raw response body.

        Raises:
            ResolverNetworkError: On connection failure, timeout or non-2xx status
        """
        ...

    async def close(self) -> None: ...


def _status_error_code(status: int) -> ErrorCode:
    if status == HTTPStatusCodes.TOO_MANY_REQUESTS:
        return ErrorCode.API_RATE_LIMIT
    if status >= HTTPStatusCodes.SERVER_ERROR_MIN:
        return ErrorCode.API_SERVER_ERROR
    return ErrorCode.API_REQUEST_FAILED


class AiohttpTransport:
    """aiohttp-backed transport.

    The session is created lazily on first use and closed by :meth:`close`.

    Args:
        timeout: Total request timeout in seconds
        user_agent: User-Agent header value
        session: Optional externally owned session (not closed by this transport)
    """

    def __init__(
        self,
        timeout: float = NetworkConfig.DEFAULT_TIMEOUT,
        user_agent: str = NetworkConfig.USER_AGENT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = {
            "Content-Type": NetworkConfig.CONTENT_TYPE_JSON,
            "Accept": NetworkConfig.ACCEPT_JSON,
            "User-Agent": user_agent,
        }
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self.headers)
            self._owns_session = True
        return self._session

    async def post(self, url: str, body: bytes) -> bytes:
        """POST ``body`` and return the response bytes.

        Raises:
            ResolverNetworkError: NETWORK_ERROR, API_TIMEOUT, API_RATE_LIMIT,
                API_SERVER_ERROR or API_REQUEST_FAILED
        """
        context = ErrorContext(
            operation=LogOperationNames.REMOTE_POST,
            additional_data={LogContextKeys.ENDPOINT: url, "body_size": len(body)},
        )
        started = time.perf_counter()

        try:
            async with self._get_session().post(url, data=body) as response:
                payload = await response.read()
                status = response.status
        except asyncio.TimeoutError as e:
            raise ResolverNetworkError(
                code=ErrorCode.API_TIMEOUT,
                message=f"Request to {url} timed out",
                context=context,
                original_error=e,
            ) from e
        except aiohttp.ClientError as e:
            raise ResolverNetworkError(
                code=ErrorCode.NETWORK_ERROR,
                message=f"Connection to {url} failed: {e!s}",
                context=context,
                original_error=e,
            ) from e

        duration_ms = (time.perf_counter() - started) * 1000
        log_api_call(logger, url, status_code=status, duration_ms=duration_ms)

        if not 200 <= status < 300:
            raise ResolverNetworkError(
                code=_status_error_code(status),
                message=f"Request to {url} failed with status {status}",
                context=ErrorContext(
                    operation=LogOperationNames.REMOTE_POST,
                    additional_data={LogContextKeys.ENDPOINT: url, LogContextKeys.STATUS_CODE: status},
                ),
                status=status,
            )
        return payload

    async def close(self) -> None:
        """Close the owned session."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["AiohttpTransport", "Transport"]
