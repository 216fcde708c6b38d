"""
Network Configuration Constants

This module contains constants for the remote resolve endpoint and the
HTTP transport.
"""

from .cache import BASE_SECOND


class NetworkConfig:
    """Network configuration constants."""

    # Remote service
    DEFAULT_BASE_URL = "https://esi.evetech.net/latest"
    NAMES_ENDPOINT = "/universe/names/"
    MARKET_OFFERS_ENDPOINT = "/markets/offers/names/"
    STATUS_ENDPOINT = "/status/names/"

    # Timeout settings
    DEFAULT_TIMEOUT = 30 * BASE_SECOND

    # User agent
    USER_AGENT = "NameVault/0.1.0"

    # HTTP headers
    CONTENT_TYPE_JSON = "application/json"
    ACCEPT_JSON = "application/json"

    # Rate limiting (requests per period)
    DEFAULT_RATE_LIMIT = 20
    DEFAULT_RATE_PERIOD = 1.0 * BASE_SECOND


class HTTPStatusCodes:
    """HTTP status codes the transport distinguishes."""

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429
    SERVER_ERROR_MIN = 500


class ResolverDefaults:
    """Batching and concurrency defaults.

    Call sites in the wild use 50, 100 and 1000 for these; none of the
    values is load-bearing.
    """

    MAX_BATCH_SIZE = 1000
    BULK_WINDOW = 4
    FALLBACK_WINDOW = 10

    # Inclusive ranges the names endpoint can resolve. IDs at or above
    # 100_000_000 are player structures, except the newer character block.
    ADDRESSABLE_RANGES: tuple[tuple[int, int], ...] = (
        (1, 99_999_999),
        (2_100_000_000, 2_147_483_647),
    )

    PLACEHOLDER_CATEGORY = "unknown"
