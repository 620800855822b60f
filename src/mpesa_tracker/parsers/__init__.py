"""Parsers for M-PESA notification messages"""

from .base import MessageParser, DataTransformer
from .notification_parser import NotificationParser, extract_transaction_id
from .metadata_parser import MetadataExtractor
from .batch_segmenter import BatchSegmenter

__all__ = [
    'MessageParser',
    'DataTransformer',
    'NotificationParser',
    'extract_transaction_id',
    'MetadataExtractor',
    'BatchSegmenter',
]
