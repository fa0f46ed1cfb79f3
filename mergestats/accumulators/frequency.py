"""
Exact frequency table accumulator.
"""
from __future__ import annotations

from collections import Counter
import logging
from typing import Any, Dict, Hashable, Iterator, List, Optional, Tuple

from mergestats.accumulators.base import MergeableAccumulator, register_accumulator
from mergestats.model import StatValue
from mergestats.ordering import DEFAULT_CHUNK_SIZE, TotalOrder, parallel_sort

logger = logging.getLogger(__name__)

DEFAULT_FREQUENCY_CAPACITY = 10_000
DEFAULT_TOP_N = 10

Ranked = Tuple[List[Tuple[Any, int]], int]


@register_accumulator
class FrequencyTable(MergeableAccumulator):
    """
    Exact per-value occurrence counts.

    Values must be hashable. Unseen values have a count of 0 and are never
    stored. Merging adds counts key-wise.

    Attributes:
        capacity: Expected number of distinct values. Advisory only, since
            dict storage cannot be reserved up front.
        top_n: Number of ranked entries reported by summarize()
        max_workers: Thread pool size used by par_frequent()
        chunk_size: Chunk size used by par_frequent()
    """
    accumulator_id = "frequency"

    def __init__(
        self,
        capacity: int = DEFAULT_FREQUENCY_CAPACITY,
        top_n: int = DEFAULT_TOP_N,
        max_workers: Optional[int] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.capacity = capacity
        self.top_n = top_n
        self.max_workers = max_workers
        self.chunk_size = chunk_size
        self._counts: Counter = Counter()

    def add(self, sample: Hashable) -> None:
        self._counts[sample] += 1

    def count(self, value: Hashable) -> int:
        """Return the number of occurrences of value, or 0 if never seen."""
        return self._counts.get(value, 0)

    def cardinality(self) -> int:
        """Return the number of distinct values."""
        return len(self._counts)

    def total(self) -> int:
        """Return the total number of samples."""
        return sum(self._counts.values())

    def mode(self) -> Optional[Any]:
        """
        Return the single most frequent value.

        Returns None if the table is empty or if two or more values tie for
        the highest count.
        """
        if not self._counts:
            return None
        highest = max(self._counts.values())
        winners = [value for value, count in self._counts.items() if count == highest]
        return winners[0] if len(winners) == 1 else None

    def most_frequent(self) -> Ranked:
        """
        Return (value, count) pairs in descending order of count, and the total.

        Equal counts keep no particular order.
        """
        return self._ranked(reverse=True)

    def least_frequent(self) -> Ranked:
        """Return (value, count) pairs in ascending order of count, and the total."""
        return self._ranked(reverse=False)

    def par_frequent(self, least: bool = False) -> Ranked:
        """
        Rank all entries by count using the parallel sort.

        Unlike most_frequent()/least_frequent(), entries with equal counts are
        ordered by value (under TotalOrder), so the result is deterministic.

        Args:
            least: Ascending order of count if True, descending otherwise.

        Returns:
            Tuple of the ranked (value, count) pairs and the total count.
        """
        sign = 1 if least else -1
        ranked = parallel_sort(
            self._counts.items(),
            key=lambda item: (sign * item[1], TotalOrder(item[0])),
            max_workers=self.max_workers,
            chunk_size=self.chunk_size,
        )
        return ranked, self.total()

    def unique_values(self) -> Iterator[Any]:
        """Return a one-pass iterator over the distinct values, in no particular order."""
        return iter(self._counts.keys())

    def merge(self, other: FrequencyTable) -> FrequencyTable:
        self._check_mergeable(other)
        self._counts.update(other._counts)
        return self

    def clear(self) -> None:
        self._counts.clear()

    def __len__(self) -> int:
        return self.total()

    def summarize(self) -> Dict[str, StatValue]:
        ranked, total = self.most_frequent()
        return {
            'total': total,
            'cardinality': self.cardinality(),
            'mode': self.mode(),
            'most_frequent': [[value, count] for value, count in ranked[:self.top_n]],
        }

    def _ranked(self, reverse: bool) -> Ranked:
        counts = sorted(self._counts.items(), key=lambda item: item[1], reverse=reverse)
        return counts, sum(count for _, count in counts)

    def __repr__(self) -> str:
        return f"FrequencyTable({dict(self._counts)!r})"
