"""
Order statistics over a lazily sorted collection of samples.

Unsorted keeps every sample and only sorts when a statistic is requested.
Its sort state is a two-state machine:

    CLEAN  -- data matches the last sort (or is empty)
    DIRTY  -- data was mutated by add(), extend() or merge() since the last sort

Every query sorts first if DIRTY, then computes over the sorted data. Sorting
uses TotalOrder as the key, so NaN samples end up after all ordered values.
"""
from __future__ import annotations

import enum
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from mergestats.accumulators.base import MergeableAccumulator, register_accumulator
from mergestats.coercion import to_float
from mergestats.model import StatValue
from mergestats.ordering import sort_samples

logger = logging.getLogger(__name__)

DEFAULT_UNSORTED_CAPACITY = 1_000

Quartiles = Tuple[float, float, float]


class SortState(enum.Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


def median(samples: Iterable[Any]) -> Optional[float]:
    """Compute the exact median of a stream. O(n log n) time, O(n) space."""
    return Unsorted.from_iterable(samples).median()


def quartiles(samples: Iterable[Any]) -> Optional[Quartiles]:
    """Compute the exact quartiles (Q1, Q2, Q3) of a stream."""
    return Unsorted.from_iterable(samples).quartiles()


def mode(samples: Iterable[Any]) -> Optional[Any]:
    """Compute the mode of a stream, or None if there is no unique mode."""
    return Unsorted.from_iterable(samples).mode()


def modes(samples: Iterable[Any]) -> List[Any]:
    """
    Compute all modes of a stream.

    Example:
        >>> modes([1, 1, 2, 2, 3])
        [1, 2]
    """
    return Unsorted.from_iterable(samples).modes()


def median_on_sorted(data: Sequence[Any]) -> Optional[float]:
    n = len(data)
    if n == 0:
        return None
    if n % 2 == 1:
        return to_float(data[n // 2])
    return (to_float(data[n // 2 - 1]) + to_float(data[n // 2])) / 2.0


def quartiles_on_sorted(data: Sequence[Any]) -> Optional[Quartiles]:
    """
    Exact quartiles of sorted data, without percentile interpolation.

    For n >= 4 the data is split by r = n % 4 and k = (n - r) // 4. Q2 is the
    median. Q1 and Q3 are the medians of the lower and upper halves, which
    exclude Q2 itself when n is odd, so each half holds exactly 2k (r in 0, 1)
    or 2k + 1 (r in 2, 3) values.
    """
    n = len(data)
    if n < 3:
        return None
    if n == 3:
        return to_float(data[0]), to_float(data[1]), to_float(data[2])

    def x(i: int) -> float:
        return to_float(data[i])

    def avg(i: int, j: int) -> float:
        return (x(i) + x(j)) / 2.0

    r = n % 4
    k = (n - r) // 4
    if r == 0:
        return avg(k - 1, k), avg(2 * k - 1, 2 * k), avg(3 * k - 1, 3 * k)
    if r == 1:
        return avg(k - 1, k), x(2 * k), avg(3 * k, 3 * k + 1)
    if r == 2:
        return x(k), avg(2 * k, 2 * k + 1), x(3 * k + 1)
    return x(k), x(2 * k + 1), x(3 * k + 2)


def _same_value(left: Any, right: Any) -> bool:
    # Decimal('sNaN') signals on ==; it equals nothing, like float('nan').
    try:
        return bool(left == right)
    except ArithmeticError:
        return False


def _runs(data: Iterable[Any]) -> Iterator[Tuple[Any, int]]:
    """Yield (value, length) for each run of equal values."""
    run_value, run_length = None, 0
    for value in data:
        if run_length and _same_value(run_value, value):
            run_length += 1
            continue
        if run_length:
            yield run_value, run_length
        run_value, run_length = value, 1
    if run_length:
        yield run_value, run_length


def mode_on_sorted(data: Iterable[Any]) -> Optional[Any]:
    # Linear in n once sorted, which beats hashing when cardinality is close to n.
    best, best_count, tied = None, 0, False
    for value, count in _runs(data):
        if count > best_count:
            best, best_count, tied = value, count, False
        elif count == best_count:
            tied = True
    return None if tied else best


def modes_on_sorted(data: Iterable[Any]) -> List[Any]:
    runs = list(_runs(data))
    highest = max((count for _, count in runs), default=0)
    if highest <= 1:
        return []
    return [value for value, count in runs if count == highest]


@register_accumulator
class Unsorted(MergeableAccumulator):
    """
    A lazily sorted collection of samples for exact order statistics.

    Works with partially ordered values such as floats with NaN; see
    mergestats.ordering.TotalOrder for where unordered values are placed.
    median() and quartiles() require numeric samples and raise
    RepresentationError otherwise. mode(), modes() and cardinality() only
    need ordering and equality.

    Attributes:
        capacity: Expected number of samples. Advisory only.
    """
    accumulator_id = "order"

    def __init__(self, capacity: int = DEFAULT_UNSORTED_CAPACITY) -> None:
        self.capacity = capacity
        self._data: List[Any] = []
        self._state = SortState.CLEAN

    @property
    def sort_state(self) -> SortState:
        return self._state

    @property
    def is_sorted(self) -> bool:
        return self._state is SortState.CLEAN

    def add(self, sample: Any) -> None:
        self._data.append(sample)
        self._state = SortState.DIRTY

    def extend(self, samples: Iterable[Any]) -> None:
        self._data.extend(samples)
        self._state = SortState.DIRTY

    def merge(self, other: Unsorted) -> Unsorted:
        self._check_mergeable(other)
        self._data.extend(other._data)
        self._state = SortState.DIRTY
        return self

    def clear(self) -> None:
        self._data.clear()
        self._state = SortState.CLEAN

    def __len__(self) -> int:
        return len(self._data)

    def sorted_values(self) -> Tuple[Any, ...]:
        """Return a snapshot of the samples in sorted order."""
        self._sort()
        return tuple(self._data)

    def median(self) -> Optional[float]:
        """Return the median, or None if there are no samples."""
        self._sort()
        return median_on_sorted(self._data)

    def quartiles(self) -> Optional[Quartiles]:
        """Return (Q1, Q2, Q3), or None if there are fewer than 3 samples."""
        self._sort()
        return quartiles_on_sorted(self._data)

    def mode(self) -> Optional[Any]:
        """
        Return the value with the strictly longest run.

        Returns None if there are no samples or the longest run is shared by
        several values (including when no value repeats and n > 1).
        """
        self._sort()
        return mode_on_sorted(self._data)

    def modes(self) -> List[Any]:
        """
        Return every value occurring the maximum number of times, in sorted order.

        A value seen only once is never a mode, so this is empty when nothing
        repeats.
        """
        self._sort()
        return modes_on_sorted(self._data)

    def cardinality(self) -> int:
        """Return the number of distinct values."""
        self._sort()
        return sum(1 for _ in _runs(self._data))

    def summarize(self) -> Dict[str, StatValue]:
        return {
            'count': len(self._data),
            'cardinality': self.cardinality(),
            'median': self.median(),
            'quartiles': self.quartiles(),
            'mode': self.mode(),
            'modes': self.modes(),
        }

    def _sort(self) -> None:
        if self._state is SortState.DIRTY:
            logger.debug(f"Sorting {len(self._data)} samples")
            sort_samples(self._data)
            self._state = SortState.CLEAN

    def __repr__(self) -> str:
        return f"Unsorted(len={len(self._data)}, state={self._state.value})"
