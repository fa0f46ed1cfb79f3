"""
Online mean, variance and standard deviation in constant space.

Samples are absorbed with Welford's update, which avoids the cancellation of
the naive sum-of-squares formula. Two accumulators are combined with the
parallel-variance formula:

    size     = s1 + s2
    mean     = (s1*m1 + s2*m2) / (s1 + s2)
    variance = (s1*v1 + s2*v2) / (s1 + s2) + s1*s2*(m1 - m2)**2 / (s1 + s2)**2

Both are exact in real arithmetic. In floating point a merged result can
differ from the sequential one by rounding.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable

from mergestats.accumulators.base import MergeableAccumulator, register_accumulator
from mergestats.coercion import to_float
from mergestats.model import StatValue

logger = logging.getLogger(__name__)


def mean(samples: Iterable[Any]) -> float:
    """Compute the mean of a stream in constant space."""
    return OnlineVariance.from_iterable(samples).mean()


def variance(samples: Iterable[Any]) -> float:
    """Compute the population variance of a stream in constant space."""
    return OnlineVariance.from_iterable(samples).variance()


def stddev(samples: Iterable[Any]) -> float:
    """Compute the population standard deviation of a stream in constant space."""
    return OnlineVariance.from_iterable(samples).stddev()


@register_accumulator
class OnlineVariance(MergeableAccumulator):
    """
    Running population size, mean and variance.

    All readers return 0.0 on an empty accumulator. Samples are converted with
    to_float(), so non-numeric or non-finite samples raise RepresentationError.
    """
    accumulator_id = "variance"

    def __init__(self) -> None:
        self._size = 0
        self._mean = 0.0
        self._variance = 0.0

    @property
    def size(self) -> int:
        """Number of samples absorbed."""
        return self._size

    def mean(self) -> float:
        return self._mean

    def variance(self) -> float:
        return self._variance

    def stddev(self) -> float:
        return math.sqrt(self._variance)

    def add(self, sample: Any) -> None:
        """
        Add a sample.

        Raises:
            RepresentationError: If the sample is not a finite number. The
                accumulator is left unchanged.
        """
        x = to_float(sample)
        delta = x - self._mean
        self._size += 1
        self._mean += delta / self._size
        self._variance = (self._variance * (self._size - 1) + delta * (x - self._mean)) / self._size

    def merge(self, other: OnlineVariance) -> OnlineVariance:
        self._check_mergeable(other)
        if other._size == 0:
            return self
        if self._size == 0:
            self._size, self._mean, self._variance = other._size, other._mean, other._variance
            return self

        s1, s2 = float(self._size), float(other._size)
        total = s1 + s2
        mean_diff = self._mean - other._mean
        merged_mean = (s1 * self._mean + s2 * other._mean) / total
        merged_variance = (
            (s1 * self._variance + s2 * other._variance) / total
            + (s1 * s2 * mean_diff * mean_diff) / (total * total)
        )

        self._size += other._size
        self._mean = merged_mean
        self._variance = merged_variance
        return self

    def clear(self) -> None:
        self._size = 0
        self._mean = 0.0
        self._variance = 0.0

    def __len__(self) -> int:
        return self._size

    def summarize(self) -> Dict[str, StatValue]:
        return {
            'size': self._size,
            'mean': self._mean,
            'variance': self._variance,
            'stddev': self.stddev(),
        }

    def __repr__(self) -> str:
        return f"OnlineVariance(size={self._size}, mean={self._mean!r}, variance={self._variance!r})"
