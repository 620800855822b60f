"""Error taxonomy and structured error logging for the notification tracker."""

import json
import logging
import sys
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any, Iterable


class ErrorSeverity(Enum):
    """Error severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    DATA_PARSING = "data_parsing"
    DATA_VALIDATION = "data_validation"
    PERSISTENCE = "persistence"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


class TrackerError(Exception):
    """Base class for all tracker errors.

    Every subclass carries a category and a stable error code so failures can
    be grouped in logs and reports.
    """
    category = ErrorCategory.SYSTEM
    error_code = "S999"


class NotificationParseError(TrackerError):
    """A notification could not be turned into a transaction"""
    category = ErrorCategory.DATA_PARSING


class GrammarMismatch(NotificationParseError):
    """Text does not have the shape of an outgoing M-PESA notification"""
    error_code = "P001"

    def __init__(self, anchor: str):
        self.anchor = anchor
        super().__init__(f"not a valid outgoing M-PESA message (expected {anchor})")


class FieldConversionError(NotificationParseError):
    """A field matched structurally but could not be converted"""
    field_name = "field"

    def __init__(self, raw_value: str, reason: Optional[str] = None):
        self.raw_value = raw_value
        message = f"failed to parse {self.field_name}: '{raw_value}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidAmount(FieldConversionError):
    field_name = "amount"
    error_code = "P002"


class InvalidBalance(FieldConversionError):
    field_name = "balance"
    error_code = "P003"


class InvalidFee(FieldConversionError):
    field_name = "cost"
    error_code = "P004"


class InvalidDateTime(FieldConversionError):
    field_name = "date/time"
    error_code = "P005"


class InvalidCategory(TrackerError):
    """Category annotation is missing or not one of the accepted categories"""
    category = ErrorCategory.DATA_VALIDATION
    error_code = "V001"

    def __init__(self, value: str, valid_categories: Iterable[str] = ()):
        self.value = value
        self.valid_categories = tuple(valid_categories)
        super().__init__(f"Invalid category '{value}'")


class DuplicateTransaction(TrackerError):
    """The transaction id is already stored"""
    category = ErrorCategory.PERSISTENCE
    error_code = "S001"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"transaction {transaction_id} already recorded")


class PersistenceFailure(TrackerError):
    """The store rejected a read or write for a reason other than a duplicate"""
    category = ErrorCategory.PERSISTENCE
    error_code = "S002"

    def __init__(self, detail: str, transaction_id: Optional[str] = None, operation: str = "save transaction"):
        self.detail = detail
        self.transaction_id = transaction_id
        self.operation = operation
        super().__init__(f"failed to {operation}: {detail}")


class ConfigurationError(TrackerError):
    """Required configuration is missing or invalid"""
    category = ErrorCategory.CONFIGURATION
    error_code = "C001"


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    transaction_id: Optional[str] = None
    position: Optional[int] = None
    raw_value: Optional[str] = None
    stack_trace: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class JSONFormatter(logging.Formatter):
    """Formats log records as one JSON object per line"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for key in ('error_code', 'category', 'transaction_id', 'context'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class ErrorHandler:
    """Collects error details and emits them through structured logging"""

    LOGGER_NAME = 'mpesa_tracker.errors'

    def __init__(self, log_directory: Optional[str] = None, enable_console: bool = False):
        self.log_directory = Path(log_directory) if log_directory else None
        self.errors: List[ErrorDetail] = []
        self._setup_logging(enable_console)

    def _setup_logging(self, enable_console: bool):
        """Attach JSON file handlers and an optional console handler"""
        self.logger = logging.getLogger(self.LOGGER_NAME)
        self.logger.setLevel(logging.DEBUG)

        # Handlers from a previous instance would duplicate output
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if self.log_directory is not None:
            self.log_directory.mkdir(parents=True, exist_ok=True)
            today = datetime.now().strftime('%Y%m%d')

            file_handler = logging.FileHandler(self.log_directory / f"tracker_{today}.jsonl")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(file_handler)

            error_file_handler = logging.FileHandler(self.log_directory / f"errors_{today}.jsonl")
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(error_file_handler)

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(console_handler)

    def log_error(self,
                  error: Exception,
                  transaction_id: Optional[str] = None,
                  position: Optional[int] = None,
                  context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Record an error with its category and code"""
        category = getattr(error, 'category', ErrorCategory.SYSTEM)
        error_code = getattr(error, 'error_code', TrackerError.error_code)

        stack_trace = None
        if error.__traceback__ is not None:
            stack_trace = ''.join(traceback.format_exception(type(error), error, error.__traceback__))

        detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.ERROR.value,
            category=category.value,
            error_code=error_code,
            message=str(error),
            transaction_id=transaction_id,
            position=position,
            raw_value=getattr(error, 'raw_value', None),
            stack_trace=stack_trace,
            context=context or {}
        )
        self.errors.append(detail)

        self.logger.error(
            str(error),
            extra={
                'error_code': error_code,
                'category': category.value,
                'transaction_id': transaction_id,
                'context': context or {}
            }
        )
        return detail

    def log_outcome_failure(self, error: Exception, position: int, transaction_id: str) -> ErrorDetail:
        """Record the failure of one batch candidate"""
        return self.log_error(
            error,
            transaction_id=transaction_id,
            position=position,
            context={'position': position}
        )

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of recorded errors grouped by category and code"""
        errors_by_category: Dict[str, int] = {}
        errors_by_code: Dict[str, int] = {}
        for error in self.errors:
            errors_by_category[error.category] = errors_by_category.get(error.category, 0) + 1
            errors_by_code[error.error_code] = errors_by_code.get(error.error_code, 0) + 1

        return {
            'total_errors': len(self.errors),
            'errors_by_category': errors_by_category,
            'errors_by_code': errors_by_code,
        }

    def has_errors(self) -> bool:
        return len(self.errors) > 0
