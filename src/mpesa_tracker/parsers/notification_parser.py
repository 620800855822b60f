"""Parser for outgoing M-PESA confirmation messages.

A notification looks like::

    TIH6CSP6KA Confirmed. Ksh40.00 sent to Jane Doe on 17/9/25 at 6:59 PM
    New M-PESA balance is Ksh679.18. Transaction cost, Ksh0.00.

The parser walks the text anchor by anchor ("<id> Confirmed", "Ksh... sent|paid
to", "on <date> at", "<time>", "New ... balance is", "Transaction cost") so a
structural mismatch names the anchor that was missing, and a field that matched
structurally but cannot be converted raises its own error.
"""

import logging
import re
from typing import Dict, Optional

from .base import MessageParser, DataTransformer
from ..models.core import ParsedTransaction
from ..utils.error_handler import (
    GrammarMismatch,
    InvalidAmount,
    InvalidBalance,
    InvalidFee,
)


logger = logging.getLogger(__name__)


_FLAGS = re.IGNORECASE

_HEADER = re.compile(r'\b(?P<transaction_id>\w+)\s+Confirmed\b[\s.,]*', _FLAGS | re.ASCII)

# Anchors are matched in order, each starting where the previous one ended
_ANCHORS = (
    ('amount', re.compile(r'Ksh\s?(?P<amount>\S+?)\s+(?:sent|paid)\s+to\s+', _FLAGS)),
    ('date', re.compile(
        r'(?P<recipient>.+?)\s*\.?\s+on\s+'
        r'(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{2})\s+at\s+',
        _FLAGS
    )),
    ('time', re.compile(r'(?P<hour>\d{1,2}):(?P<minute>\d{2})\s?(?P<meridiem>AM|PM)\.?\s*', _FLAGS)),
    ('balance', re.compile(
        r'New\s+(?:M-PESA|business)\s+balance\s+is\s+Ksh\s?(?P<balance>\S+?)\.?\s*'
        r'Transaction\s+cost,?\s*',
        _FLAGS
    )),
    # Fee ends at whitespace, end of text, or a sentence period
    ('cost', re.compile(r'Ksh\s?(?P<fee>\S+?)(?=\.?(?:\s|$)|\.[^\d\s])', _FLAGS)),
)

_LEADING_ID = re.compile(r'^(\w+)\s+Confirmed', _FLAGS | re.ASCII)


class NotificationParser(MessageParser):
    """Parser for outgoing (sent/paid) M-PESA notifications"""

    def __init__(self, transformer: Optional[DataTransformer] = None):
        self.transformer = transformer or DataTransformer()

    def parse(self, text: str) -> ParsedTransaction:
        """Parse one notification.

        Args:
            text: Notification text, usually the first line of a chat message

        Returns:
            ParsedTransaction with every field populated

        Raises:
            GrammarMismatch: The text is not a notification
            FieldConversionError: A matched field could not be converted
        """
        first_mismatch: Optional[GrammarMismatch] = None

        # A stray "<word> Confirmed" before the real header should not hide it
        for header in _HEADER.finditer(text):
            try:
                fields = self._scan(text, header)
            except GrammarMismatch as e:
                if first_mismatch is None:
                    first_mismatch = e
                continue
            return self._build(fields)

        if first_mismatch is None:
            first_mismatch = GrammarMismatch("'<id> Confirmed'")
        logger.debug(f"Notification not recognized: {first_mismatch}")
        raise first_mismatch

    def _scan(self, text: str, header: re.Match) -> Dict[str, str]:
        """Match every anchor after the header and collect the captured fields"""
        fields = {'transaction_id': header.group('transaction_id')}
        pos = header.end()

        for name, pattern in _ANCHORS:
            match = self._expect(name, pattern, text, pos)
            fields.update(match.groupdict())
            pos = match.end()

        return fields

    @staticmethod
    def _expect(name: str, pattern: re.Pattern, text: str, pos: int) -> re.Match:
        match = pattern.match(text, pos)
        if match is None:
            raise GrammarMismatch(name)
        return match

    def _build(self, fields: Dict[str, str]) -> ParsedTransaction:
        amount = self.transformer.normalize_money(fields['amount'], InvalidAmount)
        if amount <= 0:
            raise InvalidAmount(fields['amount'], "amount must be positive")

        timestamp = self.transformer.build_timestamp(
            fields['day'], fields['month'], fields['year'],
            fields['hour'], fields['minute'], fields['meridiem']
        )

        return ParsedTransaction(
            transaction_id=fields['transaction_id'],
            amount=amount,
            recipient=self.transformer.normalize_recipient(fields['recipient']),
            timestamp=timestamp,
            balance_after=self.transformer.normalize_money(fields['balance'], InvalidBalance),
            fee=self.transformer.normalize_money(fields['fee'], InvalidFee),
        )


def extract_transaction_id(text: str) -> str:
    """Best-effort transaction id for reporting a notification that failed to parse"""
    line = text.strip()
    match = _LEADING_ID.match(line)
    if match:
        return match.group(1)

    tokens = line.split()
    if tokens:
        return tokens[0]
    return "?"
