"""Core data models for the M-PESA notification tracker."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Dict, Any, Optional


DEFAULT_CATEGORIES = ("food", "travel", "savings", "church", "investments")
UNCATEGORIZED = "uncategorized"


@dataclass(frozen=True)
class ParsedTransaction:
    """Transaction extracted from a single notification.

    Attributes:
        transaction_id: The M-PESA reference (e.g. "TIH5CRR635")
        amount: Amount sent or paid, in shillings
        recipient: Whitespace-normalized counterparty name
        timestamp: Date and time stated in the notification
        balance_after: Account balance after the transaction
        fee: Transaction cost
    """
    transaction_id: str
    amount: Decimal
    recipient: str
    timestamp: datetime
    balance_after: Decimal
    fee: Decimal


@dataclass
class TransactionRecord:
    """Durable transaction with its category annotation"""
    transaction_id: str
    amount: Decimal
    recipient: str
    timestamp: datetime
    balance_after: Decimal
    fee: Decimal
    category: str
    reason: str = ""

    @classmethod
    def from_parsed(cls, parsed: ParsedTransaction, category: str, reason: str = "") -> "TransactionRecord":
        """Build a record from a parsed notification and its metadata"""
        return cls(
            transaction_id=parsed.transaction_id,
            amount=parsed.amount,
            recipient=parsed.recipient,
            timestamp=parsed.timestamp,
            balance_after=parsed.balance_after,
            fee=parsed.fee,
            category=category.strip().lower(),
            reason=reason,
        )


@dataclass(frozen=True)
class BatchCandidate:
    """One notification found inside a batch message, with its metadata lines"""
    message: str
    metadata: List[str] = field(default_factory=list)


class OutcomeStatus(Enum):
    """Result of ingesting one candidate"""
    SUCCESS = "success"
    DUPLICATE = "duplicate"
    FAILURE = "failure"


@dataclass
class ItemOutcome:
    """Outcome for a single batch candidate.

    Attributes:
        position: 1-based position of the candidate in the chat message
        status: Success, duplicate or failure
        transaction_id: Parsed id, or a best-effort id when parsing failed
        detail: Error description for failures
    """
    position: int
    status: OutcomeStatus
    transaction_id: str
    detail: str = ""

    @property
    def message(self) -> str:
        """Line used when reporting this outcome back to the user"""
        if self.status is OutcomeStatus.SUCCESS:
            return f"{self.position} [{self.transaction_id}]"
        if self.status is OutcomeStatus.DUPLICATE:
            return f"{self.position} [{self.transaction_id}] (duplicate)"
        return f"{self.position} [{self.transaction_id}]: {self.detail}"


@dataclass
class BatchSummary:
    """Aggregated outcomes of one batch ingestion run"""
    outcomes: List[ItemOutcome] = field(default_factory=list)
    nothing_found: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def _with_status(self, status: OutcomeStatus) -> List[ItemOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def success_count(self) -> int:
        return len(self._with_status(OutcomeStatus.SUCCESS))

    @property
    def duplicate_count(self) -> int:
        return len(self._with_status(OutcomeStatus.DUPLICATE))

    @property
    def failure_count(self) -> int:
        return len(self._with_status(OutcomeStatus.FAILURE))

    @property
    def successes(self) -> List[str]:
        return [o.message for o in self._with_status(OutcomeStatus.SUCCESS)]

    @property
    def duplicates(self) -> List[str]:
        return [o.message for o in self._with_status(OutcomeStatus.DUPLICATE)]

    @property
    def failures(self) -> List[str]:
        return [o.message for o in self._with_status(OutcomeStatus.FAILURE)]

    @property
    def duration(self) -> float:
        """Wall-clock duration of the run in seconds"""
        if not self.started_at or not self.finished_at:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'total': self.total,
            'nothing_found': self.nothing_found,
            'success_count': self.success_count,
            'duplicate_count': self.duplicate_count,
            'failure_count': self.failure_count,
            'successes': self.successes,
            'duplicates': self.duplicates,
            'failures': self.failures,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
            'duration': self.duration,
        }


@dataclass
class IngestResult:
    """Identifying fields returned after a single message is stored"""
    transaction_id: str
    amount: Decimal
    recipient: str
    category: str


@dataclass
class TrackerConfig:
    """Configuration for tracker behavior"""
    database_url: str = "sqlite:///transaction.db"
    categories: Optional[List[str]] = None
    retry_max_attempts: int = 3
    retry_backoff_seconds: float = 0.1
    summary_limit: int = 10
    log_directory: Optional[str] = None
    command_prefix: str = "!summary"

    def __post_init__(self):
        if self.categories is None:
            self.categories = list(DEFAULT_CATEGORIES)
        else:
            self.categories = [c.strip().lower() for c in self.categories]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BotSettings:
    """Secrets required to run the chat bot"""
    bot_token: str
    channel_id: str
