"""Validation of category annotations."""

from typing import Iterable, Optional, Tuple

from ..models.core import DEFAULT_CATEGORIES
from .error_handler import InvalidCategory


class CategoryValidator:
    """Checks categories against a closed, case-insensitive set.

    The set is injected (normally from ``TrackerConfig.categories``) so new
    categories can be added without touching the parsers.
    """

    def __init__(self, categories: Optional[Iterable[str]] = None):
        source = DEFAULT_CATEGORIES if categories is None else categories
        ordered = []
        for category in source:
            normalized = self.normalize(category)
            if normalized and normalized not in ordered:
                ordered.append(normalized)
        self._categories: Tuple[str, ...] = tuple(ordered)

    @property
    def valid_categories(self) -> Tuple[str, ...]:
        """Accepted categories in configuration order"""
        return self._categories

    @staticmethod
    def normalize(category: str) -> str:
        return category.strip().lower()

    def is_valid(self, category: str) -> bool:
        return self.normalize(category) in self._categories

    def validate(self, category: str) -> str:
        """Return the normalized category or raise InvalidCategory"""
        if not self.is_valid(category):
            raise InvalidCategory(category, self._categories)
        return self.normalize(category)
