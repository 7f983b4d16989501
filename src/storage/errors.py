class StorageError(Exception):
    """Base exception for key-value persistence failures."""


class StorageReadError(StorageError):
    """Raised when the backing store cannot be read or decoded."""


class StorageWriteError(StorageError):
    """Raised when a value cannot be serialized or written."""
