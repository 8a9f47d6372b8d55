"""
Abstract base classes for the storage engine.
"""

from logdb.interfaces.index_loader import IndexLoader

__all__ = ["IndexLoader"]
