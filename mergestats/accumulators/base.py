"""
Base class, registry and reduction helpers for mergeable accumulators.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from mergestats.model import StatValue

logger = logging.getLogger(__name__)

A = TypeVar('A', bound='MergeableAccumulator')

MERGE_STRATEGIES = ('linear', 'tree')

# Accumulator Registry
_ACCUMULATOR_REGISTRY: Dict[str, Type['MergeableAccumulator']] = {}


def register_accumulator(cls: Type['MergeableAccumulator']) -> Type['MergeableAccumulator']:
    """
    Decorator to register an accumulator class in the global registry.

    Usage:
        @register_accumulator
        class MyAccumulator(MergeableAccumulator):
            accumulator_id = "my_accumulator"
            ...
    """
    if getattr(cls, 'accumulator_id', ''):
        _ACCUMULATOR_REGISTRY[cls.accumulator_id] = cls
        logger.debug(f"Registered accumulator: {cls.accumulator_id}")
    else:
        logger.warning(f"Accumulator {cls.__name__} missing 'accumulator_id' attribute, not registered")
    return cls


def get_accumulator_registry() -> Dict[str, Type['MergeableAccumulator']]:
    """Get a copy of the global accumulator registry."""
    return _ACCUMULATOR_REGISTRY.copy()


class MergeableAccumulator(ABC):
    """
    Base class for mergeable accumulators.

    An accumulator summarizes a stream of samples added one at a time. Two
    accumulators of the same kind built from disjoint shards of a dataset can
    be merged into one that represents the union of their inputs. merge() is
    associative and commutative, so shards can be reduced in any order and
    grouping.

    Accumulators are not thread-safe. Give each worker its own instance and
    merge the finished instances afterwards.

    Attributes:
        accumulator_id: Unique identifier for this kind of accumulator
    """
    accumulator_id: str = ""

    @abstractmethod
    def add(self, sample: Any) -> None:
        """Add a single sample."""

    @abstractmethod
    def merge(self: A, other: A) -> A:
        """
        Merge another accumulator of the same kind into this one.

        Args:
            other: Accumulator built independently from another shard. It is
                not modified.

        Returns:
            self, to allow chaining and use with functools.reduce.

        Raises:
            TypeError: If other is not the same kind of accumulator.
        """

    @abstractmethod
    def clear(self) -> None:
        """Reset to the empty state."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of samples absorbed since creation or the last clear()."""

    @abstractmethod
    def summarize(self) -> Dict[str, StatValue]:
        """Report the accumulator's statistics as a name -> value mapping."""

    def extend(self, samples: Iterable[Any]) -> None:
        """Add every sample from an iterable."""
        for sample in samples:
            self.add(sample)

    def is_empty(self) -> bool:
        """True if no samples have been absorbed."""
        return len(self) == 0

    @classmethod
    def from_iterable(cls: Type[A], samples: Iterable[Any], **options: Any) -> A:
        """Build an accumulator from an iterable of samples."""
        accumulator = cls(**options)
        accumulator.extend(samples)
        return accumulator

    def _check_mergeable(self, other: Any) -> None:
        if not isinstance(other, type(self)):
            raise TypeError(
                f"Cannot merge {type(other).__name__} into {type(self).__name__}"
            )


def merge_all(accumulators: Iterable[A], strategy: str = 'linear') -> Optional[A]:
    """
    Reduce accumulators of the same kind to a single accumulator.

    The inputs are consumed: they are merged into in place and the returned
    accumulator is one of them.

    Args:
        accumulators: Accumulators to reduce.
        strategy: 'linear' folds left to right; 'tree' merges neighbours
            pairwise in rounds, like a balanced binary tree.

    Returns:
        The reduced accumulator, or None if no accumulators were given.

    Raises:
        ValueError: If strategy is unknown.
        TypeError: If the accumulators are not all of the same kind.
    """
    if strategy not in MERGE_STRATEGIES:
        raise ValueError(f"Unknown merge strategy {strategy!r}, expected one of {MERGE_STRATEGIES}")

    pending: List[A] = list(accumulators)
    if not pending:
        return None

    logger.debug(f"Merging {len(pending)} accumulators using {strategy} strategy")

    if strategy == 'linear':
        result = pending[0]
        for accumulator in pending[1:]:
            result.merge(accumulator)
        return result

    while len(pending) > 1:
        merged = [left.merge(right) for left, right in zip(pending[0::2], pending[1::2])]
        if len(pending) % 2:
            merged.append(pending[-1])
        pending = merged
    return pending[0]
