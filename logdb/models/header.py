"""
Header - fixed-size metadata block that precedes every record in the log.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class Header:
    """
    Fixed-size record header.

    Format (little-endian, no padding):
        [checksum:4][timestamp:4][is_deleted:1][key_size:4][value_size:4]

    Attributes:
        checksum: Reserved checksum slot, always written as 0.
        timestamp: Reserved creation time slot, always written as 0.
        is_deleted: Tombstone flag, rewritten in place on delete.
        key_size: Length of the key payload in bytes.
        value_size: Length of the value payload in bytes.
    """

    SIZE: ClassVar[int] = 17

    checksum: int
    timestamp: int
    is_deleted: bool
    key_size: int
    value_size: int

    def __bytes__(self) -> bytes:
        """Serialize the header to exactly SIZE bytes."""
        return (
            self.checksum.to_bytes(4, "little")
            + self.timestamp.to_bytes(4, "little")
            + int(self.is_deleted).to_bytes(1, "little")
            + self.key_size.to_bytes(4, "little")
            + self.value_size.to_bytes(4, "little")
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Header":
        """
        Deserialize a header from the first SIZE bytes of data.

        Raises:
            ValueError: If fewer than SIZE bytes are supplied.
        """
        if len(data) < cls.SIZE:
            raise ValueError(
                f"Header requires {cls.SIZE} bytes, got {len(data)}"
            )

        return cls(
            checksum=int.from_bytes(data[0:4], "little"),
            timestamp=int.from_bytes(data[4:8], "little"),
            is_deleted=data[8] != 0,
            key_size=int.from_bytes(data[9:13], "little"),
            value_size=int.from_bytes(data[13:17], "little"),
        )

    def record_size(self) -> int:
        """Total on-disk size of the record this header describes."""
        return self.SIZE + self.key_size + self.value_size
