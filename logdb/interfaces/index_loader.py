"""
IndexLoader abstract base class for building the key -> offset index.
"""

from abc import ABC, abstractmethod

from logdb.models.log_file import LogFile


class IndexLoader(ABC):
    """
    Strategy that produces the in-memory index for an opened log.

    The engine calls the loader exactly once, from ``Engine.open``, so a
    different strategy (for example one reading a saved snapshot) can be
    swapped in without touching get, put or delete.

    Implementations:
    - LogReplayer: full linear scan of the log
    """

    @abstractmethod
    def load(self, log_file: LogFile) -> dict[str, int]:
        """
        Build the index for an open log file.

        Args:
            log_file: The opened log to index.

        Returns:
            Mapping from each live key to the offset of its latest record.
        """
        pass
