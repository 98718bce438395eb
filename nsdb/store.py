"""In-memory namespace store.

Holds the data as a structure `[<namespace>][<key>] -> value` where both keys
and values are strings. A single reader/writer lock guards the whole
mapping; reads share it, writes take it exclusively.
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Mapping, NamedTuple, Optional

from .errors import DuplicateKeyError, NotFoundError
from .locking import RWLock

logger = logging.getLogger(__name__)


class KV(NamedTuple):
    """A single key/value pair used by the bulk read and write views."""

    key: str
    value: str


class NamespaceStore:
    def __init__(self, data: Optional[Dict[str, Dict[str, str]]] = None) -> None:
        self._lock = RWLock()
        self._data: Dict[str, Dict[str, str]] = data if data is not None else {}

    def _bucket(self, namespace: str) -> Dict[str, str]:
        # Caller holds the lock. Empty buckets read as missing.
        bucket = self._data.get(namespace)
        if not bucket:
            raise NotFoundError(namespace)
        return bucket

    def get_bucket(self, namespace: str) -> Dict[str, str]:
        """Return a copy of the bucket stored under `namespace`.

        Raises `NotFoundError` if the namespace does not exist or is empty.
        The copy is detached from the store: later writes are not visible
        through it and mutating it does not change the store.
        """
        with self._lock.read():
            return dict(self._bucket(namespace))

    def get_entries(self, namespace: str) -> List[KV]:
        """Return the entries of `namespace` as a list of `KV` sorted by key."""
        with self._lock.read():
            entries = [KV(k, v) for k, v in self._bucket(namespace).items()]
        entries.sort(key=lambda kv: kv.key)
        return entries

    def set_bucket(self, namespace: str, mapping: Mapping[str, str]) -> None:
        """Merge `mapping` into the bucket of `namespace`, creating it if needed.

        Raises `TypeError`, leaving the store unchanged, if the namespace or
        any key or value is not a `str`.
        """
        with self._lock.write():
            self._merge(namespace, mapping)

    def set_entries(self, namespace: str, entries: Iterable[KV]) -> None:
        """Merge a batch of pairs into `namespace`.

        The batch is checked for repeated keys before anything is written; a
        repeat raises `DuplicateKeyError` and the store is left unchanged.
        Non-`str` keys or values raise `TypeError`, also before any write.
        Plain 2-tuples are accepted as well as `KV`.
        """
        with self._lock.write():
            batch: Dict[str, str] = {}
            for key, value in entries:
                if key in batch:
                    raise DuplicateKeyError(key)
                batch[key] = value
            self._merge(namespace, batch)

    def _merge(self, namespace: str, mapping: Mapping[str, str]) -> None:
        # Caller holds the write lock. Everything is type-checked before the
        # bucket is touched, and an empty mapping must not leave an empty
        # bucket behind.
        if not isinstance(namespace, str):
            raise TypeError(f"namespace must be str, not {type(namespace).__name__}")
        for key, value in mapping.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(f"entry {key!r}: keys and values must be str, not "
                                f"{type(key).__name__}/{type(value).__name__}")
        if not mapping:
            return
        bucket = self._data.setdefault(namespace, {})
        bucket.update(mapping)
        logger.debug("Merged %d key(s) into namespace %r", len(mapping), namespace)

    def delete_namespace(self, namespace: str) -> None:
        """Remove `namespace` and all its entries. Missing namespaces are ignored."""
        with self._lock.write():
            self._data.pop(namespace, None)

    def namespaces(self) -> List[str]:
        """Return the sorted names of all non-empty namespaces."""
        with self._lock.read():
            return sorted(ns for ns, bucket in self._data.items() if bucket)

    def __contains__(self, namespace: object) -> bool:
        with self._lock.read():
            return bool(self._data.get(namespace))  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock.read():
            return sum(1 for bucket in self._data.values() if bucket)

    @contextmanager
    def read_locked(self) -> Iterator[Dict[str, Dict[str, str]]]:
        """Hold the read lock and expose the live mapping, e.g. for encoding.

        The yielded mapping must not be mutated.
        """
        with self._lock.read():
            yield self._data

    def replace(self, data: Dict[str, Dict[str, str]]) -> None:
        """Swap in a whole new mapping, e.g. one decoded from a snapshot."""
        with self._lock.write():
            self._data = data

    def reset(self) -> None:
        """Drop every namespace."""
        self.replace({})
