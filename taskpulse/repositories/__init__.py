"""Task store implementations."""

from .memory import InMemoryTaskStore
from .sqlite import SQLiteTaskStore

__all__ = [
    "InMemoryTaskStore",
    "SQLiteTaskStore",
]
