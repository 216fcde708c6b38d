"""Resolver configuration model.

Batch size, window sizes and the addressable key space. All of these are
tunable per deployment.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from namevault.shared.constants import ResolverDefaults


class ResolverSettings(BaseModel):
    """Batching and concurrency configuration."""

    max_batch_size: int = Field(
        default=ResolverDefaults.MAX_BATCH_SIZE,
        gt=0,
        description="Maximum keys per bulk request",
    )
    bulk_window: int = Field(
        default=ResolverDefaults.BULK_WINDOW,
        gt=0,
        description="Concurrent bulk requests in flight",
    )
    fallback_window: int = Field(
        default=ResolverDefaults.FALLBACK_WINDOW,
        gt=0,
        description="Concurrent single-key requests in flight",
    )
    addressable_ranges: list[tuple[int, int]] = Field(
        default_factory=lambda: list(ResolverDefaults.ADDRESSABLE_RANGES),
        description="Inclusive (low, high) key ranges the remote accepts",
    )

    @field_validator("addressable_ranges")
    @classmethod
    def validate_ranges(cls, value: list[tuple[int, int]]) -> list[tuple[int, int]]:
        """Each range must be non-negative and ordered."""
        for low, high in value:
            if low < 0 or high < low:
                msg = f"Invalid addressable range: ({low}, {high})"
                raise ValueError(msg)
        return value


__all__ = ["ResolverSettings"]
