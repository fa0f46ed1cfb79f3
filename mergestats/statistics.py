from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging

from mergestats.app_hooks import AppHooks
from .model import Stats
from .pipeline import StatisticsConfig, StatisticsPipeline

logger = logging.getLogger(__name__)


def partition(samples: Sequence[Any], shard_count: int) -> List[Sequence[Any]]:
    """
    Split samples into shard_count contiguous, nearly equal shards.

    Shards differ in length by at most one; trailing shards are empty when
    there are fewer samples than shards.
    """
    if shard_count < 1:
        raise ValueError(f"shard_count must be at least 1, got {shard_count}")
    size, extra = divmod(len(samples), shard_count)
    shards = []
    start = 0
    for i in range(shard_count):
        end = start + size + (1 if i < extra else 0)
        shards.append(samples[start:end])
        start = end
    return shards


class Statistics:
    """
    High-level interface for computing statistics over a sample sequence.

    This is a convenience wrapper around StatisticsPipeline: the samples are
    split into shards, each shard is accumulated independently, and the
    shards are merged before summarizing.

    Example:
        stats = Statistics(samples=[3, 5, 7, 9], shards=2)
        stats.get_value('order', 'median')    # 6.0
        stats.get_value('variance', 'mean')   # 6.0
    """

    def __init__(
        self,
        samples: Optional[Iterable[Any]] = None,
        shards: int = 1,
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[Path] = None,
        app_hooks: Optional[AppHooks] = None
    ) -> None:
        """
        Initialize statistics collection.

        Args:
            samples: Optional samples to analyze immediately
            shards: Number of shards to split the samples into
            config_dict: Dictionary shaped like the YAML 'statistics' section
                (e.g., {'accumulators': {'order': False}})
            config_file: Path to YAML config file
            app_hooks: Optional application hooks for progress reporting
        """
        self.app_hooks = app_hooks
        self.shards = shards

        if config_dict:
            self.config = StatisticsConfig.from_dict(config_dict)
        elif config_file:
            self.config = StatisticsConfig(config_file=config_file)
        else:
            # Use defaults - all accumulators enabled
            self.config = StatisticsConfig()

        self.pipeline = StatisticsPipeline(config=self.config, app_hooks=app_hooks)

        self.samples: List[Any] = list(samples) if samples is not None else []
        self._results: Optional[Stats] = None
        if self.samples:
            self._results = self._analyze()
        elif samples is not None:
            logger.warning("No samples provided to Statistics")

    def _analyze(self) -> Stats:
        logger.info(f"Collecting statistics on {len(self.samples)} samples in {self.shards} shards")
        return self.pipeline.run(partition(self.samples, self.shards))

    @property
    def results(self) -> Optional[Stats]:
        """Get the statistics results."""
        return self._results

    def analyze(self, samples: Optional[Iterable[Any]] = None) -> Stats:
        """
        Analyze the given samples.

        Args:
            samples: Optional samples. If None, re-analyzes self.samples.

        Returns:
            Stats object with collected statistics
        """
        if samples is not None:
            self.samples = list(samples)
        self._results = self._analyze()
        return self._results

    def get_value(self, category: str, name: str, default=None):
        """
        Convenience method to get a specific statistic value.

        Args:
            category: Accumulator id (e.g., 'frequency', 'variance', 'order')
            name: Statistic name (e.g., 'median')
            default: Default value if not found
        """
        if self._results:
            return self._results.get_value(category, name, default)
        return default

    def get_category(self, category: str) -> Dict[str, Any]:
        """Get all statistics reported by one accumulator."""
        if self._results:
            return self._results.get_category(category)
        return {}

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Export all statistics as a dictionary."""
        if self._results:
            return self._results.to_dict()
        return {}
