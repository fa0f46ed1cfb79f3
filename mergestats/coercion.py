"""
coercion.py - Numeric coercion for statistics that need floating-point samples.

Provides the ToFloat capability and to_float(), which converts a sample to a
finite Python float or raises RepresentationError.
"""
from __future__ import annotations

import math
from typing import Any, Protocol, runtime_checkable


class RepresentationError(ValueError):
    """Raised when a sample cannot be represented as a finite float."""


@runtime_checkable
class ToFloat(Protocol):
    """
    Protocol for sample types that can be converted to a float.

    int, float, bool, fractions.Fraction and decimal.Decimal all implement it.
    str and bytes do not, so textual samples are rejected rather than parsed.
    """
    def __float__(self) -> float:
        ...


def to_float(value: Any) -> float:
    """
    Convert a sample to a finite float.

    Args:
        value: Sample implementing ToFloat.

    Returns:
        float: The converted value.

    Raises:
        RepresentationError: If the value does not implement ToFloat, the
            conversion fails or overflows, or the result is NaN or infinite.
    """
    if not isinstance(value, ToFloat):
        raise RepresentationError(f"Sample {value!r} of type {type(value).__name__} is not numeric")
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise RepresentationError(f"Sample {value!r} cannot be converted to float: {e}") from e
    if not math.isfinite(result):
        raise RepresentationError(f"Sample {value!r} is not a finite number")
    return result
