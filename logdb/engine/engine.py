"""
Engine - Main database engine API.
"""

import logging
import os
from collections.abc import Iterator

from logdb.engine.replayer import LogReplayer
from logdb.interfaces.index_loader import IndexLoader
from logdb.models.exceptions import InvalidDataError, KeyNotFoundError
from logdb.models.header import Header
from logdb.models.log_file import LogFile
from logdb.models.record import Record

logger = logging.getLogger(__name__)


class Engine:
    """
    Append-only key-value storage engine over a single log file.

    Provides:
    - get(key): Retrieve the latest value for a key
    - put(key, value): Insert or update a key
    - delete(key): Flag the key's latest record as deleted
    - close(): Sync the log and release the file handle

    Architecture:
    - Every put appends a record at the end of the log
    - An in-memory index maps each key to the offset of its latest record
    - The index is rebuilt on open by an IndexLoader (LogReplayer by default)

    The engine performs no locking. At most one engine instance, used by
    one caller at a time, may own a given log file.
    """

    def __init__(
        self,
        path: str,
        sync_writes: bool = False,
        loader: IndexLoader | None = None,
    ) -> None:
        """
        Initialize the engine without touching the disk.

        Use ``Engine.open`` to obtain a ready engine.

        Args:
            path: Path of the log file.
            sync_writes: If True, fsync the log after every put.
            loader: Strategy used to build the index (default: LogReplayer).
        """
        if not path or not str(path).strip():
            raise ValueError("path cannot be empty")

        self._path = os.path.abspath(path)
        self._sync_writes = sync_writes
        self._loader = loader or LogReplayer()
        self._log = LogFile(self._path)
        self._index: dict[str, int] = {}

    @classmethod
    def open(
        cls,
        path: str,
        *,
        create: bool = False,
        sync_writes: bool = False,
        loader: IndexLoader | None = None,
    ) -> "Engine":
        """
        Open the log at path and rebuild the index.

        Args:
            path: Path of the log file. Must exist unless create is True.
            create: Create an empty log when the file is missing.
            sync_writes: If True, fsync the log after every put.
            loader: Strategy used to build the index (default: LogReplayer).

        Returns:
            Ready engine instance.

        Raises:
            StoreIOError: If the file cannot be opened or read.
            InvalidDataError: If the log holds a truncated or undecodable record.
        """
        engine = cls(path, sync_writes=sync_writes, loader=loader)
        engine._log.open(create=create)
        try:
            engine._index = engine._loader.load(engine._log)
        except Exception:
            # Nothing was written, skip the sync so the load error surfaces
            engine._log.close(sync=False)
            raise

        logger.info(f"Opened {engine._path} with {len(engine._index)} live keys")
        return engine

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_closed(self) -> bool:
        return not self._log.is_open()

    def get(self, key: str) -> str:
        """
        Retrieve the value stored for key.

        Args:
            key: The key to look up.

        Returns:
            The latest value written for key.

        Raises:
            KeyNotFoundError: If key is not in the index.
            InvalidDataError: If the stored value is truncated or not valid UTF-8.
            StoreIOError: If reading the log fails.
        """
        offset = self._index.get(key)
        if offset is None:
            raise KeyNotFoundError(key)

        header = Header.from_bytes(self._log.read_at(offset, Header.SIZE))
        value_offset = offset + Header.SIZE + header.key_size
        value_bytes = self._log.read_at(value_offset, header.value_size)
        if len(value_bytes) < header.value_size:
            raise InvalidDataError(f"Truncated value for key {key!r}", offset)

        try:
            return value_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDataError(
                f"Failed to decode value for key {key!r}", offset
            ) from e

    def put(self, key: str, value: str) -> None:
        """
        Insert or update a key-value pair.

        The previous record for key, if any, stays in the log but is no
        longer reachable through the index.

        Args:
            key: The key to insert/update.
            value: The value to store.

        Raises:
            StoreIOError: If writing the log fails.
        """
        record = Record.create(key, value)
        offset = self._log.size()
        self._log.write_at(offset, bytes(record))
        if self._sync_writes:
            self._log.sync()

        self._index[key] = offset
        logger.debug(f"put {key!r} at offset {offset} ({record.size_bytes()} bytes)")

    def delete(self, key: str) -> None:
        """
        Delete a key by flagging its latest record in place.

        Only the header's deleted byte changes on disk; the key and value
        payloads are left untouched.

        Args:
            key: The key to delete.

        Raises:
            KeyNotFoundError: If key is not in the index.
            StoreIOError: If reading or writing the log fails.
        """
        offset = self._index.get(key)
        if offset is None:
            raise KeyNotFoundError(key)

        header = Header.from_bytes(self._log.read_at(offset, Header.SIZE))
        header.is_deleted = True
        self._log.write_at(offset, bytes(header))

        del self._index[key]
        logger.debug(f"delete {key!r} at offset {offset}")

    def close(self) -> None:
        """Force all writes to disk and release the file handle."""
        if self.is_closed:
            return
        self._log.close()
        logger.info(f"Closed {self._path}")

    def keys(self) -> Iterator[str]:
        """Iterate over the live keys."""
        return iter(list(self._index))

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
