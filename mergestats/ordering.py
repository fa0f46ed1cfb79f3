"""
ordering.py - Total ordering and sort primitives for accumulator data.

TotalOrder wraps values that only have a partial order (floats with NaN) so
that they can be sorted deterministically:

    - Values unequal to themselves (NaN-like) sort after every ordered value.
    - Two such values, or two ordered values neither of which is less than the
      other, compare as equivalent, so a stable sort keeps their insertion order.

sort_samples() is the sequential, stable sort used by the order-statistics
accumulator. parallel_sort() sorts chunks in a thread pool and k-way merges
them; it is only stable with respect to the key, so callers must supply a key
that breaks ties (e.g. (count, TotalOrder(value))).
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import heapq
import logging
from typing import Any, Callable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_CHUNK_SIZE = 10_000


def _is_unordered(value: Any) -> bool:
    """
    True for values that are not equal to themselves, such as float('nan').

    Values whose self-comparison signals an arithmetic error, such as
    Decimal('sNaN'), are unordered as well.
    """
    try:
        return bool(value != value)
    except ArithmeticError:
        return True
    except (TypeError, ValueError):
        return False


class TotalOrder:
    """Sort key imposing a total order on partially ordered values."""

    __slots__ = ('value', 'unordered')

    def __init__(self, value: Any) -> None:
        self.value = value
        self.unordered = _is_unordered(value)

    def __lt__(self, other: TotalOrder) -> bool:
        if self.unordered or other.unordered:
            return not self.unordered and other.unordered
        return bool(self.value < other.value)

    def __gt__(self, other: TotalOrder) -> bool:
        return other.__lt__(self)

    def __le__(self, other: TotalOrder) -> bool:
        return not other.__lt__(self)

    def __ge__(self, other: TotalOrder) -> bool:
        return not self.__lt__(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TotalOrder):
            return NotImplemented
        return not self.__lt__(other) and not other.__lt__(self)

    __hash__ = None

    def __repr__(self) -> str:
        return f"TotalOrder({self.value!r})"


def sort_samples(data: List[Any]) -> None:
    """Stable in-place sort of raw samples under TotalOrder."""
    data.sort(key=TotalOrder)


def parallel_sort(
    items: Iterable[T],
    key: Callable[[T], Any],
    max_workers: Optional[int] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> List[T]:
    """
    Sort items by splitting them into chunks sorted concurrently.

    The chunks are sorted in a ThreadPoolExecutor and combined with
    heapq.merge. Small inputs (one chunk) are sorted directly.

    Args:
        items: Items to sort.
        key: Sort key. Must be total over the items for a deterministic result.
        max_workers: Thread pool size (None lets the executor decide).
        chunk_size: Maximum number of items per chunk.

    Returns:
        List[T]: A new sorted list.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    items = list(items)
    if len(items) <= chunk_size:
        return sorted(items, key=key)

    chunks = [items[i:i + chunk_size] for i in range(0, len(items), chunk_size)]
    logger.debug(f"Parallel sort of {len(items)} items in {len(chunks)} chunks")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        sorted_chunks = list(executor.map(lambda chunk: sorted(chunk, key=key), chunks))

    return list(heapq.merge(*sorted_chunks, key=key))
