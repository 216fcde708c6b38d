"""TTL policy.

Maps each TTL class to its freshness window. The class name doubles as
the cache namespace, so the same key under two classes is two entries.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from namevault.shared.constants import CacheConfig
from namevault.shared.errors import DomainError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


class TTLPolicy:
    """Named freshness windows, in seconds.

    Args:
        ttl_seconds: TTL per class. Defaults to CacheConfig.DEFAULT_TTL_SECONDS.

    Example:
        >>> policy = TTLPolicy({"status": 300})
        >>> policy.ttl("status")
        300
    """

    def __init__(self, ttl_seconds: Mapping[str, int] | None = None) -> None:
        source = CacheConfig.DEFAULT_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        for ttl_class, seconds in source.items():
            if seconds <= 0:
                raise DomainError(
                    code=ErrorCode.VALIDATION_ERROR,
                    message=f"TTL for '{ttl_class}' must be positive, got {seconds}",
                    context=ErrorContext(
                        operation="ttl_policy_init",
                        additional_data={"ttl_class": ttl_class},
                    ),
                )
        self._ttls: dict[str, int] = dict(source)

    @property
    def classes(self) -> frozenset[str]:
        return frozenset(self._ttls)

    def validate(self, ttl_class: str) -> str:
        """Return ``ttl_class`` if known.

        Raises:
            DomainError: If the class is not configured
        """
        if ttl_class not in self._ttls:
            raise DomainError(
                code=ErrorCode.UNKNOWN_TTL_CLASS,
                message=f"Unknown TTL class: {ttl_class!r}",
                context=ErrorContext(
                    operation="ttl_lookup",
                    additional_data={
                        "ttl_class": str(ttl_class),
                        "known_classes": ",".join(sorted(self._ttls)),
                    },
                ),
            )
        return ttl_class

    def ttl(self, ttl_class: str) -> int:
        """Freshness window of ``ttl_class`` in seconds."""
        return self._ttls[self.validate(ttl_class)]

    def as_dict(self) -> dict[str, int]:
        """Copy of the class to seconds mapping."""
        return dict(self._ttls)

    def __contains__(self, ttl_class: object) -> bool:
        return ttl_class in self._ttls

    def __repr__(self) -> str:
        return f"TTLPolicy({self._ttls!r})"


__all__ = ["TTLPolicy"]
