"""Tests for category/reason annotation parsing."""

from mpesa_tracker.parsers.metadata_parser import MetadataExtractor


class TestMetadataExtractor:
    """Test cases for MetadataExtractor"""

    def setup_method(self):
        """Set up test fixtures"""
        self.extractor = MetadataExtractor()

    def test_short_keys(self):
        assert self.extractor.extract(["c: food", "r: lunch"]) == ("food", "lunch")

    def test_no_lines(self):
        """Test defaults when nothing is annotated"""
        assert self.extractor.extract([]) == ("uncategorized", "")

    def test_long_keys_any_case(self):
        """Test full key names with mixed case and no space after the colon"""
        category, reason = self.extractor.extract(["Category:Travel", "REASON:  Bus to Town  "])

        assert category == "Travel"
        assert reason == "Bus to Town"

    def test_empty_category_keeps_default(self):
        """Test that an empty category value never overwrites"""
        assert self.extractor.extract(["category: "]) == ("uncategorized", "")
        assert self.extractor.extract(["c: food", "c:"]) == ("food", "")

    def test_last_line_wins(self):
        """Test that later annotations override earlier ones"""
        category, reason = self.extractor.extract(["c: food", "r: lunch", "c: travel", "r: "])

        assert category == "travel"
        assert reason == ""

    def test_value_keeps_later_colons(self):
        """Test that only the first colon splits key from value"""
        _, reason = self.extractor.extract(["r: meeting at 10:30"])
        assert reason == "meeting at 10:30"

    def test_ignores_unknown_and_plain_lines(self):
        """Test that lines without a known key are skipped"""
        lines = ["", "   ", "thanks!", "note: ignore me", "c: church"]
        assert self.extractor.extract(lines) == ("church", "")

    def test_custom_default(self):
        extractor = MetadataExtractor(default_category="misc")
        assert extractor.extract(["r: x"]) == ("misc", "x")
