"""Ingestion pipeline: notification text in, stored transactions out.

Single messages fail fast and raise the first error. Batch messages are split
into candidates that are processed in order; each candidate gets exactly one
outcome (success, duplicate or failure) and a failing candidate never stops
the rest of the batch.
"""

import logging
from typing import Optional, Union

from .models.core import BatchCandidate, BatchSummary, IngestResult, TrackerConfig, TransactionRecord
from .parsers.batch_segmenter import BatchSegmenter
from .parsers.metadata_parser import MetadataExtractor
from .parsers.notification_parser import NotificationParser, extract_transaction_id
from .storage.base import TransactionStore
from .utils.error_handler import (
    DuplicateTransaction,
    ErrorHandler,
    InvalidCategory,
    NotificationParseError,
    TrackerError,
)
from .utils.processing_tracker import BatchTracker
from .utils.retry import RetryPolicy, fixed_backoff
from .utils.validation import CategoryValidator


logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Parses, validates and stores M-PESA notifications"""

    def __init__(self,
                 store: TransactionStore,
                 parser: Optional[NotificationParser] = None,
                 extractor: Optional[MetadataExtractor] = None,
                 validator: Optional[CategoryValidator] = None,
                 segmenter: Optional[BatchSegmenter] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 error_handler: Optional[ErrorHandler] = None):
        self.store = store
        self.parser = parser or NotificationParser()
        self.extractor = extractor or MetadataExtractor()
        self.validator = validator or CategoryValidator()
        self.segmenter = segmenter or BatchSegmenter()
        self.retry_policy = retry_policy or RetryPolicy()
        self.error_handler = error_handler

    def ingest(self, text: str) -> Union[IngestResult, BatchSummary]:
        """Route text to batch or single ingestion"""
        if self.segmenter.is_batch(text):
            return self.ingest_batch(text)
        return self.ingest_one(text)

    def ingest_one(self, text: str) -> IngestResult:
        """Store the notification on the first line of ``text``.

        Lines after the first carry the category/reason metadata. The store is
        written once; there is no retry for single messages.

        Raises:
            NotificationParseError: The first line is not a notification
            InvalidCategory: The category annotation is missing or unknown
            DuplicateTransaction: The transaction id is already stored
            PersistenceFailure: The store rejected the write
        """
        lines = text.split('\n')
        parsed = self.parser.parse(lines[0])

        category, reason = self.extractor.extract(lines[1:])
        category = self.validator.validate(category)

        record = TransactionRecord.from_parsed(parsed, category, reason)
        try:
            self.store.save(record)
        except TrackerError as e:
            if self.error_handler and not isinstance(e, DuplicateTransaction):
                self.error_handler.log_error(e, transaction_id=parsed.transaction_id)
            raise

        logger.info(f"Tracked {parsed.transaction_id}: Ksh{parsed.amount} to {parsed.recipient} in {category}")
        return IngestResult(
            transaction_id=parsed.transaction_id,
            amount=parsed.amount,
            recipient=parsed.recipient,
            category=category,
        )

    def ingest_batch(self, text: str) -> BatchSummary:
        """Store every notification found in ``text``"""
        tracker = BatchTracker(error_handler=self.error_handler)
        tracker.start_batch()

        candidates = self.segmenter.segment(text)
        if not candidates:
            logger.info("No notifications found in batch message")

        for position, candidate in enumerate(candidates, 1):
            self._ingest_candidate(tracker, position, candidate)

        return tracker.generate_batch_summary()

    def _ingest_candidate(self, tracker: BatchTracker, position: int, candidate: BatchCandidate) -> None:
        try:
            parsed = self.parser.parse(candidate.message)
        except NotificationParseError as e:
            tracker.record_failure(position, extract_transaction_id(candidate.message), e)
            return

        category, reason = self.extractor.extract(candidate.metadata)
        if not self.validator.is_valid(category):
            tracker.record_failure(position, parsed.transaction_id,
                                   InvalidCategory(category, self.validator.valid_categories))
            return

        record = TransactionRecord.from_parsed(parsed, category, reason)
        try:
            self.retry_policy.call(self.store.save, record)
        except DuplicateTransaction:
            tracker.record_duplicate(position, parsed.transaction_id)
            return
        except TrackerError as e:
            tracker.record_failure(position, parsed.transaction_id, e)
            return

        tracker.record_success(position, parsed.transaction_id)


def create_pipeline(config: TrackerConfig,
                    store: TransactionStore,
                    error_handler: Optional[ErrorHandler] = None) -> IngestionPipeline:
    """Build a pipeline wired from a TrackerConfig"""
    return IngestionPipeline(
        store=store,
        validator=CategoryValidator(config.categories),
        retry_policy=RetryPolicy(
            max_attempts=config.retry_max_attempts,
            backoff=fixed_backoff(config.retry_backoff_seconds),
        ),
        error_handler=error_handler,
    )
