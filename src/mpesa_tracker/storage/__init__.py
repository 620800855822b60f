"""Transaction stores"""

from .base import TransactionStore
from .memory_store import InMemoryTransactionStore
from .sql_store import SQLTransactionStore

__all__ = ['TransactionStore', 'InMemoryTransactionStore', 'SQLTransactionStore']
