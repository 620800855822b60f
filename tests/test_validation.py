"""Tests for category validation."""

import pytest

from mpesa_tracker.utils.error_handler import ErrorCategory, InvalidCategory
from mpesa_tracker.utils.validation import CategoryValidator


class TestCategoryValidator:
    """Test cases for CategoryValidator"""

    def setup_method(self):
        """Set up test fixtures"""
        self.validator = CategoryValidator()

    def test_default_categories(self):
        assert self.validator.valid_categories == ("food", "travel", "savings", "church", "investments")

    def test_case_insensitive(self):
        assert self.validator.is_valid("FOOD")
        assert self.validator.is_valid(" Savings ")

    def test_uncategorized_is_rejected(self):
        """Test that the extractor's default never passes validation"""
        assert not self.validator.is_valid("uncategorized")

    def test_validate_returns_normalized(self):
        assert self.validator.validate("Travel") == "travel"

    def test_validate_raises(self):
        """Test the error raised for an unknown category"""
        with pytest.raises(InvalidCategory) as exc_info:
            self.validator.validate("snacks")

        error = exc_info.value
        assert error.value == "snacks"
        assert error.valid_categories == self.validator.valid_categories
        assert error.category == ErrorCategory.DATA_VALIDATION
        assert str(error) == "Invalid category 'snacks'"

    def test_injected_categories(self):
        """Test that the accepted set comes from configuration"""
        validator = CategoryValidator(["Rent", "food", "FOOD", " "])

        assert validator.valid_categories == ("rent", "food")
        assert validator.is_valid("rent")
        assert not validator.is_valid("travel")
