"""Per-candidate outcome tracking and batch summaries."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..models.core import BatchSummary, ItemOutcome, OutcomeStatus
from .error_handler import ErrorHandler


logger = logging.getLogger(__name__)


class BatchTracker:
    """Accumulates outcomes of one batch run in candidate order"""

    def __init__(self,
                 error_handler: Optional[ErrorHandler] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.error_handler = error_handler
        self.clock = clock
        self.outcomes: List[ItemOutcome] = []
        self.batch_start_time: Optional[datetime] = None

    def start_batch(self):
        """Start tracking a new batch"""
        self.batch_start_time = self.clock()
        self.outcomes = []

    def record_success(self, position: int, transaction_id: str) -> ItemOutcome:
        logger.info(f"Candidate {position} [{transaction_id}] stored")
        return self._record(ItemOutcome(position, OutcomeStatus.SUCCESS, transaction_id))

    def record_duplicate(self, position: int, transaction_id: str) -> ItemOutcome:
        logger.info(f"Candidate {position} [{transaction_id}] already recorded, skipping")
        return self._record(ItemOutcome(position, OutcomeStatus.DUPLICATE, transaction_id))

    def record_failure(self, position: int, transaction_id: str, error: Exception) -> ItemOutcome:
        logger.info(f"Candidate {position} [{transaction_id}] failed: {error}")
        if self.error_handler:
            self.error_handler.log_outcome_failure(error, position, transaction_id)
        return self._record(ItemOutcome(position, OutcomeStatus.FAILURE, transaction_id, detail=str(error)))

    def _record(self, outcome: ItemOutcome) -> ItemOutcome:
        if self.batch_start_time is None:
            self.start_batch()
        self.outcomes.append(outcome)
        return outcome

    def generate_batch_summary(self) -> BatchSummary:
        """Generate summary of the current batch"""
        if self.batch_start_time is None:
            raise ValueError("No batch processing started")

        summary = BatchSummary(
            outcomes=sorted(self.outcomes, key=lambda o: o.position),
            nothing_found=not self.outcomes,
            started_at=self.batch_start_time,
            finished_at=self.clock(),
        )

        logger.info(
            f"Batch complete: {summary.success_count} stored, "
            f"{summary.duplicate_count} duplicates, {summary.failure_count} failed"
        )
        return summary
