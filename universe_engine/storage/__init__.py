"""Storage port and adapters for the universe engine."""

from universe_engine.storage.base import (
    RecordNotFoundError,
    RecordStore,
    StorageError,
    select_one,
)
from universe_engine.storage.memory import InMemoryStore
from universe_engine.storage.sqlite import SQLiteStore

__all__ = [
    "InMemoryStore",
    "RecordNotFoundError",
    "RecordStore",
    "SQLiteStore",
    "StorageError",
    "select_one",
]
