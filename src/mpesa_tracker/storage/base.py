"""Interface the ingestion pipeline uses to persist transactions."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List

from ..models.core import TransactionRecord


class TransactionStore(ABC):
    """Abstract base class for transaction stores.

    Implementations must enforce uniqueness of ``transaction_id``: saving a
    record whose id is already stored raises ``DuplicateTransaction`` and
    leaves the stored record untouched. Any other write failure raises
    ``PersistenceFailure``.
    """

    @abstractmethod
    def save(self, record: TransactionRecord) -> None:
        """Persist a new record"""
        pass

    @abstractmethod
    def find_by_category(self, category: str) -> List[TransactionRecord]:
        """Records in the category, newest first"""
        pass

    @abstractmethod
    def sum_amount_by_category(self) -> Dict[str, Decimal]:
        """Total amount per stored category"""
        pass

    @abstractmethod
    def all_transactions(self) -> List[TransactionRecord]:
        """Every record, newest first"""
        pass
