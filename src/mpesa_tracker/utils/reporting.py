"""Category summaries computed from stored transactions."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List

from ..models.core import TransactionRecord
from ..storage.base import TransactionStore


ZERO = Decimal('0.00')


@dataclass
class CategoryOverview:
    """Totals per category in configured order"""
    totals: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return sum(self.totals.values(), ZERO)

    @property
    def is_empty(self) -> bool:
        return not self.totals


@dataclass
class CategoryReport:
    """Most recent transactions of one category"""
    category: str
    recent: List[TransactionRecord]
    transaction_count: int
    total: Decimal

    @property
    def remaining(self) -> int:
        """Transactions not included in ``recent``"""
        return self.transaction_count - len(self.recent)


def build_overview(store: TransactionStore, categories: Iterable[str]) -> CategoryOverview:
    """Sum amounts for the given categories, skipping those with no transactions"""
    sums = store.sum_amount_by_category()
    return CategoryOverview(totals={c: sums[c] for c in categories if c in sums})


def build_category_report(store: TransactionStore, category: str, limit: int = 10) -> CategoryReport:
    records = store.find_by_category(category)
    return CategoryReport(
        category=category.strip().lower(),
        recent=records[:limit],
        transaction_count=len(records),
        total=sum((r.amount for r in records), ZERO),
    )
