"""Category and reason annotations that follow a notification."""

from typing import Iterable, Tuple

from ..models.core import UNCATEGORIZED


CATEGORY_KEYS = ('category', 'c')
REASON_KEYS = ('reason', 'r')


class MetadataExtractor:
    """Reads "key: value" annotation lines.

    Supported keys are ``category``/``c`` and ``reason``/``r`` in any case, with
    or without a space after the colon. Later lines override earlier ones. An
    empty category value is ignored, an empty reason clears the reason.
    """

    def __init__(self, default_category: str = UNCATEGORIZED):
        self.default_category = default_category

    def extract(self, lines: Iterable[str]) -> Tuple[str, str]:
        """Return ``(category, reason)`` from the given lines"""
        category = self.default_category
        reason = ""

        for line in lines:
            stripped = line.strip()
            if not stripped:
                continue

            key, sep, value = stripped.partition(':')
            if not sep:
                continue

            key = key.strip().lower()
            value = value.strip()

            if key in CATEGORY_KEYS:
                if value:
                    category = value
            elif key in REASON_KEYS:
                reason = value

        return category, reason
