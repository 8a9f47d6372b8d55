"""
LogFile - offset-addressed access to the single on-disk log.
"""

import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from logdb.models.exceptions import InvalidDataError, StoreIOError
from logdb.models.header import Header
from logdb.models.record import Record


class LogFile:
    """
    Owns the file handle of an append-only log.

    Every read and write names its offset explicitly, so callers never
    depend on where a previous call left the file cursor.
    """

    def __init__(self, file_path: str) -> None:
        """
        Initialize LogFile.

        Args:
            file_path: Path to the log file.
        """
        self.file_path = file_path
        self._file: BinaryIO | None = None

    def open(self, create: bool = False) -> None:
        """
        Open the log for reading and writing.

        Args:
            create: If True, create an empty log when the file is missing.
                    Otherwise the file must already exist.

        Raises:
            StoreIOError: If the file is missing or cannot be opened.
        """
        try:
            if create:
                Path(self.file_path).touch(exist_ok=True)
            self._file = open(self.file_path, "r+b")
        except OSError as e:
            raise StoreIOError("open", self.file_path, e) from e

    def is_open(self) -> bool:
        return self._file is not None

    def _handle(self, operation: str) -> BinaryIO:
        if self._file is None:
            raise StoreIOError(operation, self.file_path)
        return self._file

    def read_at(self, offset: int, size: int) -> bytes:
        """
        Read up to size bytes starting at offset.

        Returns fewer bytes only when the end of the file is reached.
        """
        f = self._handle("read")
        try:
            f.seek(offset)
            return f.read(size)
        except OSError as e:
            raise StoreIOError("read", self.file_path, e) from e

    def write_at(self, offset: int, data: bytes) -> None:
        """Write data at offset and hand it to the OS."""
        f = self._handle("write")
        try:
            f.seek(offset)
            f.write(data)
            f.flush()
        except OSError as e:
            raise StoreIOError("write", self.file_path, e) from e

    def size(self) -> int:
        """Return the current length of the file in bytes."""
        f = self._handle("stat")
        try:
            f.seek(0, os.SEEK_END)
            return f.tell()
        except OSError as e:
            raise StoreIOError("stat", self.file_path, e) from e

    def sync(self) -> None:
        """Flush Python buffers and force the file contents to disk."""
        f = self._handle("sync")
        try:
            f.flush()
            os.fsync(f.fileno())
        except OSError as e:
            raise StoreIOError("sync", self.file_path, e) from e

    def close(self, sync: bool = True) -> None:
        """
        Close the file. Safe to call more than once.

        Args:
            sync: If True, force buffered writes to disk before closing.
        """
        if self._file:
            try:
                if sync:
                    self.sync()
            finally:
                self._file.close()
                self._file = None

    def scan(self) -> Iterator[tuple[int, Record]]:
        """
        Iterate over (offset, record) pairs from the start of the log.

        Raises:
            InvalidDataError: If the log ends in the middle of a record.
            StoreIOError: If a read fails.
        """
        offset = 0
        while True:
            header_bytes = self.read_at(offset, Header.SIZE)
            if not header_bytes:
                return
            if len(header_bytes) < Header.SIZE:
                raise InvalidDataError("Truncated record header", offset)

            header = Header.from_bytes(header_bytes)
            record_size = header.record_size()
            record_bytes = self.read_at(offset, record_size)
            if len(record_bytes) < record_size:
                raise InvalidDataError("Truncated record body", offset)

            yield offset, Record.from_bytes(record_bytes, offset)
            offset += record_size

    def __enter__(self) -> "LogFile":
        if self._file is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
