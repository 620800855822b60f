"""Abstract base classes and shared field conversions for message parsers."""

import re
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Type

from ..models.core import ParsedTransaction
from ..utils.error_handler import (
    FieldConversionError,
    InvalidDateTime,
    NotificationParseError,
)


_NUMBER_RE = re.compile(r'\d+(?:\.\d+)?')
_WHITESPACE_RE = re.compile(r'\s+')
_CENTS = Decimal('0.01')


class MessageParser(ABC):
    """Abstract base class for notification parsers"""

    @abstractmethod
    def parse(self, text: str) -> ParsedTransaction:
        """Parse the text and return a transaction, raising NotificationParseError on failure"""
        pass

    def can_parse(self, text: str) -> bool:
        """Check if the text is recognized by this parser"""
        try:
            self.parse(text)
            return True
        except NotificationParseError:
            return False


class DataTransformer:
    """Converts raw captured fields into typed values"""

    def normalize_money(self, raw: str, error_cls: Type[FieldConversionError]) -> Decimal:
        """Convert a money token such as "1,234.50" to a Decimal rounded to cents.

        Args:
            raw: Captured text following the "Ksh" prefix
            error_cls: Field error raised when the text is not numeric

        Returns:
            Decimal with two decimal places
        """
        cleaned = raw.strip().replace(',', '')
        if not _NUMBER_RE.fullmatch(cleaned):
            raise error_cls(raw)

        try:
            return Decimal(cleaned).quantize(_CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation as e:
            raise error_cls(raw) from e

    def normalize_recipient(self, recipient: str) -> str:
        """Trim, drop one trailing period and collapse internal whitespace"""
        cleaned = recipient.strip()
        if cleaned.endswith('.'):
            cleaned = cleaned[:-1]
        return _WHITESPACE_RE.sub(' ', cleaned).strip()

    def build_timestamp(self, day: str, month: str, year: str,
                        hour: str, minute: str, meridiem: str) -> datetime:
        """Compose a datetime from D/M/YY and a 12-hour clock time"""
        raw = f"{day}/{month}/{year} {hour}:{minute} {meridiem.upper()}"

        hour_12 = int(hour)
        if not 1 <= hour_12 <= 12:
            raise InvalidDateTime(raw, "hour must be between 1 and 12")

        hour_24 = hour_12 % 12
        if meridiem.upper() == 'PM':
            hour_24 += 12

        try:
            return datetime(2000 + int(year), int(month), int(day), hour_24, int(minute))
        except ValueError as e:
            raise InvalidDateTime(raw, str(e)) from e
