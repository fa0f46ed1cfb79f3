"""
Built-in mergeable accumulators.

Import accumulators here to automatically register them.
"""

from mergestats.accumulators.base import (
    MergeableAccumulator,
    get_accumulator_registry,
    merge_all,
    register_accumulator,
)
from mergestats.accumulators.frequency import FrequencyTable
from mergestats.accumulators.unsorted import SortState, Unsorted
from mergestats.accumulators.variance import OnlineVariance

__all__ = [
    'MergeableAccumulator',
    'get_accumulator_registry',
    'merge_all',
    'register_accumulator',
    'FrequencyTable',
    'OnlineVariance',
    'SortState',
    'Unsorted',
]
