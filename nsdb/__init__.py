"""nsdb: an embedded, namespaced string key-value store."""

from .config import Config, DEFAULT_CONFIG, load_config
from .db import DB, open_db
from .errors import (
    CorruptSnapshotError,
    DuplicateKeyError,
    NotFoundError,
    NsdbError,
    StorageIOError,
)
from .store import KV, NamespaceStore

__version__ = "0.1.0"

__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "load_config",
    "DB",
    "open_db",
    "KV",
    "NamespaceStore",
    "NsdbError",
    "NotFoundError",
    "DuplicateKeyError",
    "StorageIOError",
    "CorruptSnapshotError",
]
