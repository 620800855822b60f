"""Chat bot message handling and health reporting"""

from .message_handler import InboundMessage, MessageHandler, clean_content, format_batch_report
from .health import HealthMonitor

__all__ = ['InboundMessage', 'MessageHandler', 'clean_content', 'format_batch_report', 'HealthMonitor']
