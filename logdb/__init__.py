"""
Log-structured key-value storage engine.

This package provides a single-file, append-only key-value store with:
- Put(key, value) - append a record, O(1) index update
- Get(key) - one index lookup plus two positional reads
- Delete(key) - in-place tombstone flag on the latest record
- Open(path) - rebuild the in-memory index by replaying the log
"""

from logdb.engine.engine import Engine
from logdb.models.exceptions import (
    InvalidDataError,
    KeyNotFoundError,
    StoreError,
    StoreIOError,
)

__all__ = [
    "Engine",
    "StoreError",
    "StoreIOError",
    "KeyNotFoundError",
    "InvalidDataError",
]
