"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import TimestampedBase, RecordBase
from .conversation import Conversation, Message
from .memory import MemoryRecord, MemoryCategory, MemoryPriority

__all__ = [
    "TimestampedBase", "RecordBase",
    "Conversation", "Message",
    "MemoryRecord", "MemoryCategory", "MemoryPriority",
]
