"""Database lifecycle: open, save, close.

    from nsdb import open_db, Config

    db, teardown = open_db(Config(path="data/app.db"))
    db.set_bucket("settings", {"theme": "dark"})
    db.save()
    teardown()

Opening with no config (or `DEFAULT_CONFIG`) gives a purely in-memory
database whose contents are lost on close.
"""
from __future__ import annotations
import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .base import SnapshotBackend
from .config import DEFAULT_CONFIG, Config
from .errors import StorageIOError
from .file_backend import FileSnapshotBackend
from .memory_backend import MemorySnapshotBackend
from .serializer import Serializer, create_serializer, decode_store, encode_store
from .store import KV, NamespaceStore

logger = logging.getLogger(__name__)


def create_backend(config: Config) -> SnapshotBackend:
    """Pick the snapshot backend for `config`: file-backed or in-memory."""
    if config.in_memory:
        return MemorySnapshotBackend()
    return FileSnapshotBackend(config.path)


class DB:
    """A namespaced string store with optional single-file persistence.

    Use `open_db` rather than constructing this directly; `open` must run
    before the database is usable.
    """

    def __init__(self, config: Config, backend: SnapshotBackend, serializer: Serializer) -> None:
        self._config = config
        self._backend = backend
        self._serializer = serializer
        self._store = NamespaceStore()
        self._closed = True

    @property
    def config(self) -> Config:
        return self._config

    @property
    def in_memory(self) -> bool:
        return self._config.in_memory

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> None:
        """Open the backend and load the snapshot it holds.

        An empty snapshot file is first initialised with an encoded empty
        store so every file on disk is a well-formed snapshot. On any error
        the file handle is released before the error propagates.
        """
        self._backend.open()
        if not self.in_memory:
            try:
                if self._backend.is_empty():
                    self._backend.save(encode_store({}, self._serializer))
                    self._backend.flush()
                    logger.info("Initialised empty snapshot at %s", self._config.path)
                self._store.replace(decode_store(self._backend.load(), self._serializer))
            except Exception:
                self._backend.abort()
                raise
            logger.info("Opened %s with %d namespace(s)", self._config.path, len(self._store))
        self._closed = False

    def save(self) -> None:
        """Write the whole store to the backing file. No-op in memory mode.

        The store's read lock is held while encoding and writing, so writers
        wait for the save to finish while readers carry on.
        """
        if self.in_memory:
            return
        if self._closed:
            raise StorageIOError("cannot save a closed database")
        with self._store.read_locked() as data:
            blob = encode_store(data, self._serializer)
            self._backend.save(blob)
        logger.debug("Saved snapshot to %s (%d bytes)", self._config.path, len(blob))

    def close(self) -> None:
        """Save, sync and close the backing file, then empty the store.

        Closing an already closed database does nothing.
        """
        if self._closed:
            return
        self.save()
        self._backend.close()
        self._store.reset()
        self._closed = True
        logger.debug("Closed database %s", self._config.path or "<memory>")

    def __enter__(self) -> "DB":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_bucket(self, namespace: str) -> Dict[str, str]:
        return self._store.get_bucket(namespace)

    def get_entries(self, namespace: str) -> List[KV]:
        return self._store.get_entries(namespace)

    def set_bucket(self, namespace: str, mapping: Mapping[str, str]) -> None:
        self._store.set_bucket(namespace, mapping)

    def set_entries(self, namespace: str, entries: Iterable[KV]) -> None:
        self._store.set_entries(namespace, entries)

    def delete_namespace(self, namespace: str) -> None:
        self._store.delete_namespace(namespace)

    def namespaces(self) -> List[str]:
        return self._store.namespaces()

    def __repr__(self) -> str:
        where = self._config.path or "<memory>"
        state = "closed" if self._closed else "open"
        return f"DB({where!r}, {state})"


def open_db(config: Optional[Config] = None) -> Tuple[DB, Callable[[], None]]:
    """Open a database and return it together with its teardown function.

    `config=None` selects `DEFAULT_CONFIG` (in-memory). The teardown function
    is `DB.close`.
    """
    config = config if config is not None else DEFAULT_CONFIG
    serializer = create_serializer(config.serializer, password=config.password, key=config.key)
    db = DB(config, create_backend(config), serializer)
    db.open()
    return db, db.close
