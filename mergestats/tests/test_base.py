"""
Tests for accumulators.base module.
"""
from __future__ import annotations

from typing import Any, Dict, List

import pytest

from mergestats.accumulators import (
    FrequencyTable,
    MergeableAccumulator,
    OnlineVariance,
    Unsorted,
    get_accumulator_registry,
    merge_all,
)
from mergestats.accumulators import base as base_module


class OrderTracker(MergeableAccumulator):
    """Records samples in merge order, to observe how merge_all groups inputs."""
    accumulator_id = "order_tracker"

    def __init__(self, label: str = "") -> None:
        self.labels: List[str] = [label] if label else []

    def add(self, sample: Any) -> None:
        self.labels.append(sample)

    def merge(self, other: 'OrderTracker') -> 'OrderTracker':
        self._check_mergeable(other)
        self.labels = ['(' + ''.join(self.labels)] + other.labels + [')']
        return self

    def clear(self) -> None:
        self.labels = []

    def __len__(self) -> int:
        return len(self.labels)

    def summarize(self) -> Dict[str, Any]:
        return {'labels': ''.join(self.labels)}


class TestRegistry:
    """Tests for the accumulator registry."""

    def test_builtins_registered(self):
        """Test the built-in accumulators are registered by id."""
        registry = get_accumulator_registry()

        assert registry['frequency'] is FrequencyTable
        assert registry['variance'] is OnlineVariance
        assert registry['order'] is Unsorted

    def test_registry_is_a_copy(self):
        """Test callers cannot mutate the global registry."""
        registry = get_accumulator_registry()
        registry.pop('frequency')

        assert 'frequency' in get_accumulator_registry()

    def test_register_and_missing_id(self, monkeypatch):
        """Test registering a class, and skipping one without an id."""
        monkeypatch.setattr(base_module, '_ACCUMULATOR_REGISTRY', {})

        base_module.register_accumulator(OrderTracker)

        class Anonymous(OrderTracker):
            accumulator_id = ""

        base_module.register_accumulator(Anonymous)

        assert get_accumulator_registry() == {'order_tracker': OrderTracker}


class TestContract:
    """Tests for the shared accumulator behaviour."""

    def test_cannot_instantiate_abstract(self):
        """Test the base class is abstract."""
        with pytest.raises(TypeError):
            MergeableAccumulator()

    def test_from_iterable_and_extend(self):
        """Test construction from an iterable, then extension."""
        acc = OrderTracker.from_iterable(iter('ab'))
        acc.extend('c')

        assert acc.labels == ['a', 'b', 'c']
        assert not acc.is_empty()

    @pytest.mark.parametrize('acc', [FrequencyTable(), OnlineVariance(), Unsorted()])
    def test_new_accumulators_empty(self, acc):
        """Test each built-in starts empty."""
        assert acc.is_empty()
        assert len(acc) == 0


class TestMergeAll:
    """Tests for merge_all()."""

    def test_empty_input(self):
        """Test no accumulators reduce to None."""
        assert merge_all([]) is None
        assert merge_all(iter([]), strategy='tree') is None

    def test_single_input(self):
        """Test a single accumulator is returned as is."""
        acc = OrderTracker('a')

        assert merge_all([acc]) is acc

    def test_linear_grouping(self):
        """Test linear strategy folds left to right."""
        result = merge_all([OrderTracker(c) for c in 'abcd'], strategy='linear')

        assert result.summarize()['labels'] == '(((ab)c)d)'

    def test_tree_grouping(self):
        """Test tree strategy merges neighbours in rounds."""
        result = merge_all([OrderTracker(c) for c in 'abcde'], strategy='tree')

        assert result.summarize()['labels'] == '(((ab)(cd))e)'

    def test_unknown_strategy(self):
        """Test an invalid strategy name."""
        with pytest.raises(ValueError):
            merge_all([OrderTracker('a')], strategy='random')

    def test_mixed_kinds(self):
        """Test accumulators of different kinds cannot be reduced together."""
        with pytest.raises(TypeError):
            merge_all([FrequencyTable(), OnlineVariance()])

    def test_strategies_agree(self, int_samples):
        """Test linear and tree reductions agree for every built-in."""
        chunks = [int_samples[i:i + 37] for i in range(0, len(int_samples), 37)]

        for cls in (FrequencyTable, OnlineVariance, Unsorted):
            linear = merge_all([cls.from_iterable(chunk) for chunk in chunks], strategy='linear')
            tree = merge_all([cls.from_iterable(chunk) for chunk in chunks], strategy='tree')
            linear_summary, tree_summary = linear.summarize(), tree.summarize()

            assert linear_summary.keys() == tree_summary.keys()
            for name, value in linear_summary.items():
                if isinstance(value, float):
                    assert value == pytest.approx(tree_summary[name], rel=1e-9)
                elif name == 'most_frequent':
                    # equal counts may rank in either order
                    assert [c for _, c in value] == [c for _, c in tree_summary[name]]
                else:
                    assert value == tree_summary[name]
