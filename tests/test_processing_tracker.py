"""Tests for batch outcome tracking."""

from datetime import datetime, timedelta

import pytest

from mpesa_tracker.models.core import OutcomeStatus
from mpesa_tracker.utils.error_handler import ErrorHandler, GrammarMismatch
from mpesa_tracker.utils.processing_tracker import BatchTracker


class StepClock:
    """Clock advancing one second per call"""

    def __init__(self):
        self.now = datetime(2025, 9, 17, 18, 0)

    def __call__(self):
        current = self.now
        self.now += timedelta(seconds=1)
        return current


class TestBatchTracker:
    """Test cases for BatchTracker"""

    def setup_method(self):
        """Set up test fixtures"""
        self.error_handler = ErrorHandler()
        self.tracker = BatchTracker(error_handler=self.error_handler, clock=StepClock())

    def test_summary_requires_start(self):
        with pytest.raises(ValueError):
            self.tracker.generate_batch_summary()

    def test_empty_batch_is_nothing_found(self):
        self.tracker.start_batch()
        summary = self.tracker.generate_batch_summary()

        assert summary.nothing_found
        assert summary.total == 0

    def test_outcome_messages(self):
        """Test counts and the per-item report lines"""
        self.tracker.start_batch()
        self.tracker.record_success(1, "AB1")
        self.tracker.record_failure(2, "junk", GrammarMismatch("amount"))
        self.tracker.record_duplicate(3, "AB3")

        summary = self.tracker.generate_batch_summary()

        assert (summary.success_count, summary.failure_count, summary.duplicate_count) == (1, 1, 1)
        assert summary.successes == ["1 [AB1]"]
        assert summary.duplicates == ["3 [AB3] (duplicate)"]
        assert summary.failures == ["2 [junk]: not a valid outgoing M-PESA message (expected amount)"]
        assert [o.status for o in summary.outcomes] == [
            OutcomeStatus.SUCCESS, OutcomeStatus.FAILURE, OutcomeStatus.DUPLICATE
        ]
        assert summary.duration == 1.0

    def test_failures_reach_error_handler(self):
        """Test that failures are logged but duplicates are not counted as errors"""
        self.tracker.start_batch()
        self.tracker.record_duplicate(1, "AB1")
        self.tracker.record_failure(2, "AB2", GrammarMismatch("date"))

        errors = self.error_handler.errors
        assert len(errors) == 1
        assert errors[0].position == 2
        assert errors[0].transaction_id == "AB2"
        assert errors[0].error_code == "P001"
        assert self.error_handler.get_error_summary() == {
            'total_errors': 1,
            'errors_by_category': {'data_parsing': 1},
            'errors_by_code': {'P001': 1},
        }

    def test_to_dict(self):
        self.tracker.start_batch()
        self.tracker.record_success(1, "AB1")

        data = self.tracker.generate_batch_summary().to_dict()

        assert data['success_count'] == 1
        assert data['nothing_found'] is False
        assert data['started_at'] == "2025-09-17T18:00:00"
