"""
Data models for the storage engine.
"""

from logdb.models.header import Header
from logdb.models.record import Record
from logdb.models.log_file import LogFile

__all__ = [
    "Header",
    "Record",
    "LogFile",
]
