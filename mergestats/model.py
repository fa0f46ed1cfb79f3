"""
Result models for summarized accumulators.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


StatValue = Union[int, float, str, None, Tuple[float, ...], List[Any], Dict[str, Any]]


@dataclass
class Stats:
    """
    Container for summarized statistics.

    Values are grouped into categories, one per accumulator kind (e.g.
    'frequency', 'variance', 'order'), with named values within each category.
    Summaries are final: partial results are combined by merging the
    accumulators before summarizing, never by combining Stats objects.
    """
    categories: Dict[str, Dict[str, StatValue]] = field(default_factory=dict)

    def add_category(self, category: str, values: Dict[str, StatValue]) -> None:
        """Set several named values in a category at once."""
        self.categories.setdefault(category, {}).update(values)

    def get_value(self, category: str, name: str, default: Optional[StatValue] = None) -> Optional[StatValue]:
        """Get a named value from a category, or default if either is missing."""
        return self.categories.get(category, {}).get(name, default)

    def get_category(self, category: str) -> Dict[str, StatValue]:
        """Get all values in a category (empty dict if the category is missing)."""
        return self.categories.get(category, {})

    def to_dict(self) -> Dict[str, Dict[str, StatValue]]:
        """Convert to a plain dictionary."""
        return {category: dict(values) for category, values in self.categories.items()}
