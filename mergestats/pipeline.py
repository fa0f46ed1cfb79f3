"""
Pipeline for accumulating sharded samples and reducing them to statistics.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type
import yaml

from mergestats.accumulators.base import MERGE_STRATEGIES, MergeableAccumulator, get_accumulator_registry, merge_all
from mergestats.coercion import RepresentationError
from mergestats.model import Stats

logger = logging.getLogger(__name__)

ShardState = Dict[str, MergeableAccumulator]


@dataclass
class StatisticsConfig:
    """
    Configuration for statistics accumulation.

    Attributes:
        accumulators: Dict of accumulator_id -> enabled status
        options: Dict of accumulator_id -> constructor options (e.g. capacity)
        merge_strategy: 'linear' or 'tree' reduction of shards
        max_workers: Threads used to build shards (None or 1 = sequential)
        config_file: Path to YAML config file (optional)
    """
    accumulators: Dict[str, bool] = field(default_factory=dict)
    options: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    merge_strategy: str = 'tree'
    max_workers: Optional[int] = None
    config_file: Optional[Path] = None

    def __post_init__(self) -> None:
        """Load configuration from file if config_file is specified and exists."""
        if self.config_file and Path(self.config_file).exists():
            self._load_from_file()
        if self.merge_strategy not in MERGE_STRATEGIES:
            raise ValueError(f"merge_strategy must be one of {MERGE_STRATEGIES}, got {self.merge_strategy!r}")

    def _load_from_file(self) -> None:
        """
        Load configuration from YAML file.

        Reads the 'statistics' section. Each entry under 'accumulators' is
        either a bool (enabled flag) or a mapping with an optional 'enabled'
        key plus constructor options.
        """
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load statistics config from {self.config_file}: {e}")
            return

        statistics_config = data.get('statistics', {}) or {}
        self._apply(statistics_config)
        logger.info(f"Loaded statistics config from {self.config_file}")

    def _apply(self, statistics_config: Dict[str, Any]) -> None:
        self.merge_strategy = statistics_config.get('merge_strategy', self.merge_strategy)
        self.max_workers = statistics_config.get('max_workers', self.max_workers)

        for accumulator_id, settings in (statistics_config.get('accumulators', {}) or {}).items():
            if isinstance(settings, dict):
                settings = dict(settings)
                self.accumulators[accumulator_id] = bool(settings.pop('enabled', True))
                if settings:
                    self.options[accumulator_id] = settings
            elif isinstance(settings, bool):
                self.accumulators[accumulator_id] = settings
            else:
                logger.warning(f"Ignoring settings for accumulator {accumulator_id}: {settings!r}")

    def is_enabled(self, accumulator_id: str) -> bool:
        """
        Check if an accumulator is enabled.

        Args:
            accumulator_id: Identifier of the accumulator to check

        Returns:
            True if enabled (default if not specified), False otherwise
        """
        return self.accumulators.get(accumulator_id, True)

    def options_for(self, accumulator_id: str) -> Dict[str, Any]:
        """Constructor options for an accumulator (empty dict if none)."""
        return dict(self.options.get(accumulator_id, {}))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StatisticsConfig:
        """
        Create configuration from a dictionary shaped like the YAML 'statistics' section.

        Args:
            data: Dictionary with optional 'accumulators', 'merge_strategy'
                and 'max_workers' keys

        Returns:
            StatisticsConfig instance
        """
        config = cls()
        config._apply(data)
        if config.merge_strategy not in MERGE_STRATEGIES:
            raise ValueError(f"merge_strategy must be one of {MERGE_STRATEGIES}, got {config.merge_strategy!r}")
        return config


@dataclass
class StatisticsPipeline:
    """
    Builds accumulators per shard, merges them and summarizes the result.

    Each shard gets its own set of accumulators, so shards can be consumed
    concurrently without locking. The per-shard accumulators are then reduced
    per accumulator kind with merge_all().

    Attributes:
        accumulators: accumulator_id -> accumulator class to instantiate per shard
        config: Configuration for the pipeline
        app_hooks: Optional application hooks for progress reporting
    """
    accumulators: Dict[str, Type[MergeableAccumulator]] = field(default_factory=dict)
    config: StatisticsConfig = field(default_factory=StatisticsConfig)
    app_hooks: Optional[Any] = field(default=None)

    def __post_init__(self) -> None:
        """Load enabled accumulators from the registry if none were provided."""
        if not self.accumulators:
            self._load_accumulators_from_registry()

    def _load_accumulators_from_registry(self) -> None:
        for accumulator_id, accumulator_cls in get_accumulator_registry().items():
            if self.config.is_enabled(accumulator_id):
                self.accumulators[accumulator_id] = accumulator_cls
                logger.debug(f"Loaded accumulator: {accumulator_id}")
            else:
                logger.debug(f"Skipping disabled accumulator: {accumulator_id}")

    @classmethod
    def select(cls, accumulator_ids: Iterable[str], config: Optional[StatisticsConfig] = None, app_hooks: Optional[Any] = None) -> StatisticsPipeline:
        """
        Create a pipeline running only the named accumulators.

        Raises:
            ValueError: If an accumulator id is not registered.
        """
        registry = get_accumulator_registry()
        selected = {}
        for accumulator_id in accumulator_ids:
            if accumulator_id not in registry:
                raise ValueError(f"Unknown accumulator {accumulator_id!r}, expected one of {sorted(registry)}")
            selected[accumulator_id] = registry[accumulator_id]
        return cls(accumulators=selected, config=config or StatisticsConfig(), app_hooks=app_hooks)

    def new_shard(self) -> ShardState:
        """Create a fresh, empty set of accumulators for one shard."""
        return {
            accumulator_id: accumulator_cls(**self.config.options_for(accumulator_id))
            for accumulator_id, accumulator_cls in self.accumulators.items()
        }

    def accumulate(self, samples: Iterable[Any]) -> ShardState:
        """
        Feed one shard of samples to a fresh set of accumulators.

        Args:
            samples: The shard's samples

        Returns:
            accumulator_id -> accumulator holding the shard's state
        """
        shard = self.new_shard()
        accumulators = list(shard.values())
        for sample in samples:
            for accumulator in accumulators:
                accumulator.add(sample)
        return shard

    def reduce(self, shards: List[ShardState]) -> ShardState:
        """Merge per-shard accumulators into one accumulator per kind."""
        if not shards:
            return self.new_shard()
        return {
            accumulator_id: merge_all(
                (shard[accumulator_id] for shard in shards),
                strategy=self.config.merge_strategy,
            )
            for accumulator_id in self.accumulators
        }

    def summarize(self, reduced: ShardState) -> Stats:
        """
        Collect each reduced accumulator's summary into a Stats object.

        Raises:
            RepresentationError: If an accumulator holds samples its
                statistics cannot be computed over.
        """
        stats = Stats()
        for accumulator_id, accumulator in reduced.items():
            try:
                stats.add_category(accumulator_id, accumulator.summarize())
            except RepresentationError as e:
                logger.error(f"Cannot summarize accumulator {accumulator_id}: {e}", exc_info=True)
                raise
        return stats

    def run(self, shards: Iterable[Iterable[Any]]) -> Stats:
        """
        Accumulate every shard, reduce and summarize.

        Args:
            shards: Iterable of shards, each an iterable of samples

        Returns:
            Stats object with one category per accumulator
        """
        shard_list = list(shards)
        logger.debug(f"Running statistics on {len(shard_list)} shards with {len(self.accumulators)} accumulators")

        self._report_step(info="Accumulating shards", target=len(shard_list), reset_counter=True, plus_step=0)

        max_workers = self.config.max_workers
        if max_workers and max_workers > 1 and len(shard_list) > 1:
            states = self._accumulate_threaded(shard_list, max_workers)
        else:
            states = []
            for idx, shard in enumerate(shard_list):
                if self._stop_requested("Statistics accumulation stopped by user"):
                    logger.info(f"Statistics stopped after {idx} shards")
                    break
                states.append(self.accumulate(shard))
                self._report_step(plus_step=1)

        stats = self.summarize(self.reduce(states))
        logger.info(f"Statistics collected from {len(states)} shards")
        return stats

    def _accumulate_threaded(self, shard_list: List[Iterable[Any]], max_workers: int) -> List[ShardState]:
        """
        Accumulate shards in a thread pool.

        A stop request is honoured before each shard is submitted; shards
        already submitted still finish. Progress is reported as each shard
        completes. States are returned in shard order.
        """
        futures = []
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for idx, shard in enumerate(shard_list):
                if self._stop_requested("Statistics accumulation stopped by user"):
                    logger.info(f"Statistics stopped after submitting {idx} shards")
                    break
                futures.append(executor.submit(self.accumulate, shard))
            for future in as_completed(futures):
                future.result()
                self._report_step(plus_step=1)
        return [future.result() for future in futures]

    def _report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 0) -> None:
        """
        Report a step via app hooks if available.

        Args:
            info (str): Information message.
            target (int): Target count for progress.
            reset_counter (bool): Whether to reset the counter.
            plus_step (int): Incremental step count.
        """
        if self.app_hooks and callable(getattr(self.app_hooks, "report_step", None)):
            self.app_hooks.report_step(info=info, target=target, reset_counter=reset_counter, plus_step=plus_step)
        elif info:
            logger.debug(info)

    def _stop_requested(self, logger_stop_message: str = "Stop requested by user") -> bool:
        """
        Check if stop has been requested via app hooks.

        Returns:
            bool: True if stop requested, False otherwise.
        """
        if self.app_hooks and callable(getattr(self.app_hooks, "stop_requested", None)):
            if self.app_hooks.stop_requested():
                if logger_stop_message:
                    logger.info(logger_stop_message)
                return True
        return False
