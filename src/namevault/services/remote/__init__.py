"""Remote resolve service access: transport, client and profiles."""

from namevault.services.remote.client import RemoteEntity, RemoteResolveClient
from namevault.services.remote.profiles import (
    BUILTIN_PROFILES,
    MARKET_OFFERS,
    NAMES,
    STATUS,
    ResolverProfile,
    get_profile,
)
from namevault.services.remote.transport import AiohttpTransport, Transport

__all__ = [
    "BUILTIN_PROFILES",
    "MARKET_OFFERS",
    "NAMES",
    "STATUS",
    "AiohttpTransport",
    "RemoteEntity",
    "RemoteResolveClient",
    "ResolverProfile",
    "Transport",
    "get_profile",
]
