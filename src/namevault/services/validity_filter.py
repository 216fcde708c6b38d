"""Addressable key filter.

Pure range check with no I/O. Keys outside every configured range are
never sent to the remote service.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from namevault.shared.constants import ResolverDefaults
from namevault.shared.errors import create_validation_error


class ValidityFilter:
    """Accepts keys inside any inclusive ``(low, high)`` range.

    Args:
        ranges: Inclusive key ranges. Defaults to ResolverDefaults.ADDRESSABLE_RANGES.

    Raises:
        DomainError: If a range is negative or inverted

    Example:
        >>> flt = ValidityFilter([(1, 99_999_999)])
        >>> flt.is_addressable(42), flt.is_addressable(999_999_999)
        (True, False)
    """

    def __init__(self, ranges: Iterable[Sequence[int]] | None = None) -> None:
        source = ResolverDefaults.ADDRESSABLE_RANGES if ranges is None else ranges
        normalized: list[tuple[int, int]] = []
        for low, high in source:
            if low < 0 or high < low:
                raise create_validation_error(
                    f"Invalid addressable range: ({low}, {high})",
                    field="addressable_ranges",
                    operation="validity_filter_init",
                )
            normalized.append((int(low), int(high)))
        self.ranges: tuple[tuple[int, int], ...] = tuple(sorted(normalized))

    def is_addressable(self, key: int) -> bool:
        return any(low <= key <= high for low, high in self.ranges)

    def partition(self, keys: Iterable[int]) -> tuple[list[int], list[int]]:
        """Split ``keys`` into (addressable, unaddressable), order preserved."""
        addressable: list[int] = []
        unaddressable: list[int] = []
        for key in keys:
            (addressable if self.is_addressable(key) else unaddressable).append(key)
        return addressable, unaddressable

    def __repr__(self) -> str:
        return f"ValidityFilter({list(self.ranges)!r})"


__all__ = ["ValidityFilter"]
