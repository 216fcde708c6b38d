"""Batch splitting.

Keys are deduplicated and sorted before chunking so that batches are
reproducible across runs.
"""

from __future__ import annotations

from collections.abc import Iterable

from namevault.services.models import Batch
from namevault.shared.errors import create_validation_error


def split(keys: Iterable[int], max_batch_size: int) -> list[Batch]:
    """Partition ``keys`` into sorted batches of at most ``max_batch_size``.

    Args:
        keys: Keys to split; duplicates are dropped
        max_batch_size: Upper bound on batch length

    Returns:
        Batches in ascending key order

    Raises:
        DomainError: If max_batch_size is below 1

    Example:
        >>> split([5, 3, 3, 1, 9], 2)
        [(1, 3), (5, 9)]
    """
    if max_batch_size < 1:
        raise create_validation_error(
            f"max_batch_size must be at least 1, got {max_batch_size}",
            field="max_batch_size",
            operation="split",
        )

    ordered = sorted(set(keys))
    return [
        tuple(ordered[start : start + max_batch_size])
        for start in range(0, len(ordered), max_batch_size)
    ]


__all__ = ["split"]
