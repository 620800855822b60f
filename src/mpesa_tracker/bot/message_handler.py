"""Chat message handling for the tracker bot.

The chat transport (a Discord client or the CLI) hands every inbound message
to ``MessageHandler.handle`` and posts back whatever text it returns. Nothing
in here talks to the network.
"""

import logging
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..models.core import BatchSummary, IngestResult
from ..pipeline import IngestionPipeline
from ..storage.base import TransactionStore
from ..utils.error_handler import (
    DuplicateTransaction,
    InvalidCategory,
    NotificationParseError,
    PersistenceFailure,
)
from ..utils.reporting import CategoryOverview, CategoryReport, build_category_report, build_overview
from ..utils.validation import CategoryValidator


logger = logging.getLogger(__name__)

KEPT_WHITESPACE = frozenset(' \n\t\r')
NO_BATCH_TRANSACTIONS = "No valid M-PESA transactions found in batch message"
NO_TRANSACTIONS = "No transactions found."


@dataclass
class InboundMessage:
    """A chat message as delivered by the transport"""
    content: str
    channel_id: str
    author_id: str = ""
    is_self: bool = False


def clean_content(text: str) -> str:
    """Drop invisible characters that break notification parsing.

    Control and format characters (zero-width spaces, BOMs, direction marks)
    are removed, as is any whitespace other than space, tab, CR and LF.
    """
    kept = []
    for char in text:
        if char in KEPT_WHITESPACE:
            kept.append(char)
        elif char.isspace():
            continue
        elif unicodedata.category(char) in ('Cc', 'Cf'):
            continue
        else:
            kept.append(char)
    return ''.join(kept)


def format_amount(amount: Decimal) -> str:
    return f"Ksh{amount:.2f}"


def format_timestamp(timestamp: datetime) -> str:
    """Render as e.g. 'Sep 16, 2025 5:17 PM'"""
    hour = timestamp.hour % 12 or 12
    return f"{timestamp:%b} {timestamp.day}, {timestamp.year} {hour}:{timestamp:%M %p}"


def format_tracked(result: IngestResult) -> str:
    return (f"Tracked {result.transaction_id}: {format_amount(result.amount)} "
            f"to {result.recipient} in {result.category}")


def format_batch_report(summary: BatchSummary) -> str:
    if summary.nothing_found:
        return NO_BATCH_TRANSACTIONS

    lines = [
        "📊 **Batch Processing Complete**",
        f"✅ **Inserted**: {summary.success_count}/{summary.total}",
    ]
    if summary.duplicate_count:
        lines.append(f"➖ **Duplicates (skipped)**: {summary.duplicate_count}")

    if summary.successes:
        lines.append("")
        lines.append("**Succeeded:**")
        lines.extend(f"• {item}" for item in summary.successes)

    if summary.duplicates:
        lines.append("")
        lines.append("**Duplicates:**")
        lines.extend(f"• {item}" for item in summary.duplicates)

    if summary.failures:
        lines.append(f"❌ **Failed**: {summary.failure_count} transactions")
        lines.append("**Errors:**")
        lines.extend(f"• {item}" for item in summary.failures)

    return '\n'.join(lines)


def format_overview(overview: CategoryOverview) -> str:
    if overview.is_empty:
        return NO_TRANSACTIONS

    lines = ["📊 **Transaction Summary**", ""]
    for category, amount in overview.totals.items():
        lines.append(f"**{category.title()}**: {format_amount(amount)}")
    lines.append("")
    lines.append(f"**Total**: {format_amount(overview.total)}")
    return '\n'.join(lines)


def format_category_report(report: CategoryReport) -> str:
    if not report.transaction_count:
        return f"No transactions found for category: {report.category}"

    title = report.category.title()
    lines: List[str] = [f"📊 **{title} Transactions**", ""]
    for record in report.recent:
        lines.append(f"• **{format_amount(record.amount)}** to {record.recipient}")
        lines.append(f"  {format_timestamp(record.timestamp)} - {record.reason}")
        lines.append("")

    if report.remaining > 0:
        lines.append(f"... and {report.remaining} more transactions")
        lines.append("")

    lines.append(f"**Total {title}**: {format_amount(report.total)} ({report.transaction_count} transactions)")
    return '\n'.join(lines)


def format_usage(prefix: str) -> str:
    return (f"Usage: {prefix} [category]\nExamples:\n"
            f"{prefix} - show all categories\n"
            f"{prefix} food - show food transactions")


def format_invalid_category(category: str, valid_categories) -> str:
    return f"Invalid category: {category}. \n Use: {', '.join(valid_categories)}"


class MessageHandler:
    """Routes chat messages to summaries, batch or single ingestion"""

    def __init__(self,
                 pipeline: IngestionPipeline,
                 store: TransactionStore,
                 channel_id: Optional[str] = None,
                 validator: Optional[CategoryValidator] = None,
                 summary_limit: int = 10,
                 command_prefix: str = "!summary"):
        self.pipeline = pipeline
        self.store = store
        self.channel_id = channel_id
        self.validator = validator or pipeline.validator
        self.summary_limit = summary_limit
        self.command_prefix = command_prefix

    def handle(self, message: InboundMessage) -> Optional[str]:
        """Return the reply for ``message``, or None when it should be ignored"""
        if message.is_self:
            return None
        if self.channel_id is not None and message.channel_id != self.channel_id:
            return None
        return self.respond(message.content)

    def respond(self, content: str) -> str:
        """Reply to raw message text without channel filtering"""
        content = clean_content(content)

        if content.startswith(self.command_prefix):
            return self.handle_summary_command(content)

        if self.pipeline.segmenter.is_batch(content):
            return format_batch_report(self.pipeline.ingest_batch(content))

        if not content.strip():
            return "No message content provided"

        return self._ingest_single(content)

    def handle_summary_command(self, content: str) -> str:
        args = content.split()
        try:
            if len(args) == 1:
                overview = build_overview(self.store, self.validator.valid_categories)
                return format_overview(overview)
            if len(args) == 2:
                category = args[1].lower()
                if not self.validator.is_valid(category):
                    return format_invalid_category(category, self.validator.valid_categories)
                report = build_category_report(self.store, category, self.summary_limit)
                return format_category_report(report)
        except PersistenceFailure as e:
            logger.error(f"Summary lookup failed: {e}")
            return f"Failed to get summary: {e.detail}"
        return format_usage(self.command_prefix)

    def _ingest_single(self, content: str) -> str:
        try:
            result = self.pipeline.ingest_one(content)
        except NotificationParseError as e:
            logger.debug(f"Rejected message: {e}")
            return f"Invalid Mpesa Message: {e}"
        except InvalidCategory as e:
            return format_invalid_category(e.value, e.valid_categories or self.validator.valid_categories)
        except DuplicateTransaction as e:
            logger.info(f"Duplicate transaction {e.transaction_id} skipped")
            return f"Transaction {e.transaction_id} is already tracked"
        except PersistenceFailure as e:
            return f"Failed to save transaction {e.transaction_id}: {e.detail}"
        return format_tracked(result)
