from .errors import StorageError, StorageReadError, StorageWriteError
from .store import JsonFileStore, KeyValueStore, MemoryStore, default_store_path

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "default_store_path",
]
