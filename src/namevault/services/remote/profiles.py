"""Resolver profiles.

A profile describes one data class: where its bulk endpoint lives, which
TTL class its records are cached under, and which keys the endpoint can
address. The batching and escalation logic is shared by every profile.
"""

from __future__ import annotations

from dataclasses import dataclass

from namevault.shared.constants import NetworkConfig, TTLClasses
from namevault.shared.errors import DomainError, ErrorCode, ErrorContext


@dataclass(frozen=True)
class ResolverProfile:
    """Per-data-class resolution settings.

    Attributes:
        name: Profile identifier
        endpoint: Path appended to the API base URL
        ttl_class: Default TTL class for records of this profile
        addressable_ranges: Key ranges the endpoint accepts, or None for the
            configured default ranges
    """

    name: str
    endpoint: str
    ttl_class: str
    addressable_ranges: tuple[tuple[int, int], ...] | None = None


NAMES = ResolverProfile(
    name="names",
    endpoint=NetworkConfig.NAMES_ENDPOINT,
    ttl_class=TTLClasses.NAMES,
)

MARKET_OFFERS = ResolverProfile(
    name="market_offers",
    endpoint=NetworkConfig.MARKET_OFFERS_ENDPOINT,
    ttl_class=TTLClasses.MARKET_OFFERS,
)

STATUS = ResolverProfile(
    name="status",
    endpoint=NetworkConfig.STATUS_ENDPOINT,
    ttl_class=TTLClasses.STATUS,
)

BUILTIN_PROFILES: dict[str, ResolverProfile] = {
    profile.name: profile for profile in (NAMES, MARKET_OFFERS, STATUS)
}


def get_profile(name: str) -> ResolverProfile:
    """Look up a built-in profile by name.

    Raises:
        DomainError: If no built-in profile has that name
    """
    try:
        return BUILTIN_PROFILES[name]
    except KeyError as e:
        raise DomainError(
            code=ErrorCode.VALIDATION_ERROR,
            message=f"Unknown resolver profile: {name!r}",
            context=ErrorContext(
                operation="get_profile",
                additional_data={"profile": str(name)},
            ),
            original_error=e,
        ) from e


__all__ = ["BUILTIN_PROFILES", "MARKET_OFFERS", "NAMES", "STATUS", "ResolverProfile", "get_profile"]
