"""Record backends for the Idea Vault store."""

from .base import DuplicateRecord, FeedKey, RecordBackend
from .memory import MemoryBackend
from .sqlite import SqliteBackend

__all__ = ["DuplicateRecord", "FeedKey", "MemoryBackend", "RecordBackend", "SqliteBackend"]
