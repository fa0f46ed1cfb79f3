"""
Pytest fixtures for mergestats tests.
"""
from __future__ import annotations

import random
from typing import Any, List

import pytest


@pytest.fixture
def rng():
    """Seeded random generator so partitions are reproducible."""
    return random.Random(20240611)


@pytest.fixture
def int_samples(rng) -> List[int]:
    """A few hundred small integers with plenty of repeats."""
    return [rng.randint(0, 25) for _ in range(400)]


@pytest.fixture
def float_samples(rng) -> List[float]:
    """Floats spread over several orders of magnitude around a large offset."""
    return [1e6 + rng.gauss(0.0, 1.0) * 10 ** rng.randint(-2, 3) for _ in range(500)]


@pytest.fixture
def random_shards(rng):
    """Split samples into a random number of random-sized shards."""
    def _split(samples: List[Any], max_shards: int = 8) -> List[List[Any]]:
        shuffled = list(samples)
        rng.shuffle(shuffled)
        shard_count = rng.randint(1, max_shards)
        cuts = sorted(rng.randint(0, len(shuffled)) for _ in range(shard_count - 1))
        bounds = [0] + cuts + [len(shuffled)]
        return [shuffled[start:end] for start, end in zip(bounds, bounds[1:])]

    return _split


class RecordingHooks:
    """App hooks that record progress calls and can request a stop."""

    def __init__(self, stop_after: int = None):
        self.steps = []
        self.stop_after = stop_after
        self.stop_checks = 0

    def report_step(self, info="", target=None, reset_counter=False, plus_step=1):
        self.steps.append((info, target, reset_counter, plus_step))

    def stop_requested(self):
        self.stop_checks += 1
        return self.stop_after is not None and self.stop_checks > self.stop_after


@pytest.fixture
def recording_hooks():
    """Factory for RecordingHooks."""
    return RecordingHooks
