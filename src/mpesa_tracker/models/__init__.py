"""Data models and structures"""

from .core import (
    DEFAULT_CATEGORIES,
    UNCATEGORIZED,
    BatchCandidate,
    BatchSummary,
    BotSettings,
    IngestResult,
    ItemOutcome,
    OutcomeStatus,
    ParsedTransaction,
    TrackerConfig,
    TransactionRecord,
)

__all__ = [
    'DEFAULT_CATEGORIES',
    'UNCATEGORIZED',
    'BatchCandidate',
    'BatchSummary',
    'BotSettings',
    'IngestResult',
    'ItemOutcome',
    'OutcomeStatus',
    'ParsedTransaction',
    'TrackerConfig',
    'TransactionRecord',
]
