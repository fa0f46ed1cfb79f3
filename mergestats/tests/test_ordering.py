"""
Tests for ordering and coercion helpers.
"""
from __future__ import annotations

from decimal import Decimal
from fractions import Fraction
import math

import pytest

from mergestats.coercion import RepresentationError, ToFloat, to_float
from mergestats.ordering import TotalOrder, parallel_sort, sort_samples


class TestTotalOrder:
    """Tests for the TotalOrder sort key."""

    def test_ordered_values(self):
        """Test ordinary values keep their order."""
        assert TotalOrder(1) < TotalOrder(2)
        assert TotalOrder(2) > TotalOrder(1)
        assert TotalOrder(2) == TotalOrder(2)
        assert TotalOrder(1) <= TotalOrder(1)

    def test_nan_is_maximal(self):
        """Test NaN sorts after every ordered value, including infinity."""
        nan = TotalOrder(float('nan'))

        assert TotalOrder(float('inf')) < nan
        assert not nan < TotalOrder(float('-inf'))
        assert nan >= TotalOrder(1e308)

    def test_nans_are_equivalent(self):
        """Test two NaNs compare as equivalent under the total order."""
        a, b = TotalOrder(float('nan')), TotalOrder(float('nan'))

        assert not a < b
        assert not b < a
        assert a == b

    def test_incomparable_values_keep_insertion_order(self):
        """Test mutually incomparable values are stable under sort."""
        first, second = frozenset({1}), frozenset({2})
        data = [second, frozenset(), first]

        sort_samples(data)

        assert data == [frozenset(), second, first]


class TestSortPrimitives:
    """Tests for sort_samples and parallel_sort."""

    def test_sort_samples_with_nan(self):
        """Test in-place sort puts NaN last."""
        data = [float('nan'), 3.0, -1.0, 2.0]

        sort_samples(data)

        assert data[:3] == [-1.0, 2.0, 3.0]
        assert math.isnan(data[3])

    def test_sort_samples_is_stable(self):
        """Test equal keys keep insertion order."""
        first, second = 1.0, 1
        data = [2, first, second]

        sort_samples(data)

        assert data == [1.0, 1, 2]
        assert data[0] is first
        assert data[1] is second

    def test_sort_samples_with_signaling_decimal_nan(self):
        """Test a signaling Decimal NaN is placed last instead of raising."""
        data = [Decimal(3), Decimal('sNaN'), Decimal(1)]

        sort_samples(data)

        assert data[:2] == [Decimal(1), Decimal(3)]
        assert data[2].is_snan()
        assert TotalOrder(Decimal('sNaN')).unordered is True

    @pytest.mark.parametrize('chunk_size', [1, 3, 7, 1000])
    def test_parallel_sort_matches_sorted(self, int_samples, chunk_size):
        """Test chunked sort equals sequential sort for a total key."""
        pairs = list(enumerate(int_samples))
        key = lambda item: (item[1], item[0])

        assert parallel_sort(pairs, key=key, max_workers=3, chunk_size=chunk_size) == sorted(pairs, key=key)

    def test_parallel_sort_empty(self):
        """Test empty input."""
        assert parallel_sort([], key=lambda x: x) == []

    def test_parallel_sort_rejects_bad_chunk_size(self):
        """Test a non-positive chunk size."""
        with pytest.raises(ValueError):
            parallel_sort([1, 2], key=lambda x: x, chunk_size=0)


class TestToFloat:
    """Tests for numeric coercion."""

    @pytest.mark.parametrize('value, expected', [
        (3, 3.0),
        (2.5, 2.5),
        (True, 1.0),
        (Fraction(1, 4), 0.25),
        (Decimal('1.5'), 1.5),
    ])
    def test_numeric_types(self, value, expected):
        """Test supported numeric types."""
        assert isinstance(value, ToFloat)
        assert to_float(value) == expected

    @pytest.mark.parametrize('value', ['1.5', b'1', None, [1], object()])
    def test_non_numeric(self, value):
        """Test values without __float__ are rejected, strings included."""
        with pytest.raises(RepresentationError):
            to_float(value)

    @pytest.mark.parametrize('value', [float('nan'), float('inf'), float('-inf'), Decimal('NaN'), 10 ** 400])
    def test_non_finite(self, value):
        """Test values that are not finite floats are rejected."""
        with pytest.raises(RepresentationError):
            to_float(value)

    def test_is_value_error(self):
        """Test RepresentationError can be caught as ValueError."""
        with pytest.raises(ValueError):
            to_float('x')
