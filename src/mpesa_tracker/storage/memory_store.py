"""In-memory transaction store."""

import threading
from decimal import Decimal
from typing import Dict, List

from ..models.core import TransactionRecord
from ..utils.error_handler import DuplicateTransaction
from .base import TransactionStore


class InMemoryTransactionStore(TransactionStore):
    """Keeps records in a dict keyed by transaction id"""

    def __init__(self):
        self._records: Dict[str, TransactionRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: TransactionRecord) -> None:
        with self._lock:
            if record.transaction_id in self._records:
                raise DuplicateTransaction(record.transaction_id)
            self._records[record.transaction_id] = record

    def find_by_category(self, category: str) -> List[TransactionRecord]:
        wanted = category.strip().lower()
        return [r for r in self.all_transactions() if r.category == wanted]

    def sum_amount_by_category(self) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = {}
        for record in self.all_transactions():
            totals[record.category] = totals.get(record.category, Decimal('0.00')) + record.amount
        return totals

    def all_transactions(self) -> List[TransactionRecord]:
        with self._lock:
            records = list(self._records.values())
        return sorted(records, key=lambda r: r.timestamp, reverse=True)

    def __len__(self) -> int:
        return len(self._records)
