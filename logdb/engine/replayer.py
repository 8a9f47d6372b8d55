"""
LogReplayer - Rebuild the index by replaying the whole log.
"""

import logging

from logdb.interfaces.index_loader import IndexLoader
from logdb.models.log_file import LogFile

logger = logging.getLogger(__name__)


class LogReplayer(IndexLoader):
    """
    Recovers the key -> offset index from the log file.

    Records are visited in ascending offset order, so a later write for a
    key overrides an earlier one. A record whose tombstone flag is set
    removes its key, which keeps a reopened engine consistent with the
    in-process effect of delete.
    """

    def load(self, log_file: LogFile) -> dict[str, int]:
        """
        Replay every record of the log.

        Args:
            log_file: The opened log to replay.

        Returns:
            Index of live keys to record offsets.
        """
        index: dict[str, int] = {}
        records = 0
        tombstones = 0

        for offset, record in log_file.scan():
            records += 1
            if record.is_deleted:
                tombstones += 1
                index.pop(record.key, None)
            else:
                index[record.key] = offset

        logger.debug(
            f"Replayed {records} records ({tombstones} deleted) "
            f"from {log_file.file_path}"
        )
        return index
