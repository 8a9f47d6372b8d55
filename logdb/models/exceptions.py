"""
Custom exceptions for the storage engine.
"""


class StoreError(Exception):
    """Base class for every error raised by the storage engine."""


class StoreIOError(StoreError):
    """
    Raised when an underlying open, read, write or sync call fails.

    The platform error is chained and also kept on ``cause``.
    """

    def __init__(self, operation: str, path: str, cause: OSError | None = None):
        """
        Initialize I/O error.

        Args:
            operation: Name of the failing operation (e.g. "read", "sync").
            path: Path of the log file involved.
            cause: The original OSError, if any.
        """
        self.operation = operation
        self.path = path
        self.cause = cause
        message = f"{operation} failed on {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class KeyNotFoundError(StoreError, KeyError):
    """Raised when get or delete is called for a key absent from the index."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        # KeyError would otherwise render the repr of the key
        return f"Key not found: {self.key}"


class InvalidDataError(StoreError, ValueError):
    """
    Raised when stored bytes cannot be decoded.

    Covers key or value payloads that are not valid UTF-8 and records
    truncated at the end of the log.
    """

    def __init__(self, message: str, offset: int | None = None):
        """
        Initialize invalid data error.

        Args:
            message: Description of the problem.
            offset: File offset of the offending record, when known.
        """
        self.offset = offset
        if offset is not None:
            message = f"{message} (record at offset {offset})"
        super().__init__(message)
