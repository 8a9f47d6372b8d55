"""
Record dataclass for entries of the append-only log.
"""

from dataclasses import dataclass

from logdb.models.exceptions import InvalidDataError
from logdb.models.header import Header


@dataclass
class Record:
    """
    Represents a single record in the log file.

    Attributes:
        header: Fixed-size metadata (sizes and tombstone flag).
        key: The key as text.
        value: The value as text.
    """

    header: Header
    key: str
    value: str

    @classmethod
    def create(cls, key: str, value: str) -> "Record":
        """Build a live record with sizes measured in UTF-8 bytes."""
        header = Header(
            checksum=0,
            timestamp=0,
            is_deleted=False,
            key_size=len(key.encode("utf-8")),
            value_size=len(value.encode("utf-8")),
        )
        return cls(header=header, key=key, value=value)

    @property
    def is_deleted(self) -> bool:
        return self.header.is_deleted

    def __bytes__(self) -> bytes:
        """
        Serialize the record for storage.

        Format: [header:17][key][value]
        """
        return bytes(self.header) + self.key.encode("utf-8") + self.value.encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes, offset: int | None = None) -> "Record":
        """
        Deserialize a complete record.

        Args:
            data: Exactly one serialized record.
            offset: File offset of the record, used only in error messages.

        Raises:
            ValueError: If data is shorter or longer than the header declares.
            InvalidDataError: If the key or value is not valid UTF-8.
        """
        header = Header.from_bytes(data)
        expected = header.record_size()
        if len(data) != expected:
            raise ValueError(
                f"Record declares {expected} bytes, got {len(data)}"
            )

        key_end = Header.SIZE + header.key_size
        try:
            key = data[Header.SIZE:key_end].decode("utf-8")
            value = data[key_end:].decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDataError(f"Record is not valid UTF-8: {e}", offset) from e

        return cls(header=header, key=key, value=value)

    def size_bytes(self) -> int:
        """Return the size of this record in bytes."""
        return self.header.record_size()
