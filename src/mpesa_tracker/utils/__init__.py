"""Utility functions and helpers"""

from .error_handler import (
    ErrorHandler,
    ErrorCategory,
    ErrorSeverity,
    TrackerError,
    NotificationParseError,
    GrammarMismatch,
    FieldConversionError,
    InvalidAmount,
    InvalidBalance,
    InvalidFee,
    InvalidDateTime,
    InvalidCategory,
    DuplicateTransaction,
    PersistenceFailure,
    ConfigurationError,
)
from .validation import CategoryValidator
from .retry import RetryPolicy, fixed_backoff
from .config_manager import ConfigManager, load_bot_settings
from .processing_tracker import BatchTracker

__all__ = [
    'ErrorHandler',
    'ErrorCategory',
    'ErrorSeverity',
    'TrackerError',
    'NotificationParseError',
    'GrammarMismatch',
    'FieldConversionError',
    'InvalidAmount',
    'InvalidBalance',
    'InvalidFee',
    'InvalidDateTime',
    'InvalidCategory',
    'DuplicateTransaction',
    'PersistenceFailure',
    'ConfigurationError',
    'CategoryValidator',
    'RetryPolicy',
    'fixed_backoff',
    'ConfigManager',
    'load_bot_settings',
    'BatchTracker',
]
