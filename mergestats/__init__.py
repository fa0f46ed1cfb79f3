"""
mergestats package: mergeable streaming statistics accumulators.

Accumulators consume samples one at a time and can be merged, so statistics
computed over disjoint shards of a dataset combine into the same result as a
single sequential pass.

Main components:
    - FrequencyTable: exact per-value counts, mode and rankings
    - OnlineVariance: mean, variance and standard deviation (Welford)
    - Unsorted: lazily sorted samples for median, quartiles, mode(s), cardinality
    - merge_all: linear or tree reduction of per-shard accumulators
    - StatisticsPipeline / Statistics: sharded accumulation into a Stats result
"""

from mergestats.accumulators import (
    FrequencyTable,
    MergeableAccumulator,
    OnlineVariance,
    SortState,
    Unsorted,
    get_accumulator_registry,
    merge_all,
    register_accumulator,
)
from mergestats.accumulators.unsorted import median, mode, modes, quartiles
from mergestats.accumulators.variance import mean, stddev, variance
from mergestats.coercion import RepresentationError, ToFloat, to_float
from mergestats.model import Stats, StatValue
from mergestats.ordering import TotalOrder
from mergestats.pipeline import StatisticsConfig, StatisticsPipeline
from mergestats.statistics import Statistics, partition

__all__ = [
    "FrequencyTable",
    "MergeableAccumulator",
    "OnlineVariance",
    "RepresentationError",
    "SortState",
    "Stats",
    "StatValue",
    "Statistics",
    "StatisticsConfig",
    "StatisticsPipeline",
    "ToFloat",
    "TotalOrder",
    "Unsorted",
    "get_accumulator_registry",
    "mean",
    "median",
    "merge_all",
    "mode",
    "modes",
    "partition",
    "quartiles",
    "register_accumulator",
    "stddev",
    "to_float",
    "variance",
]
