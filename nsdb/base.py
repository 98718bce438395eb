"""Snapshot backend interface definitions.

Defines the SnapshotBackend abstract class used by the database to persist
and retrieve encoded snapshots. Backends deal in raw bytes only; encoding
and decoding belong to `nsdb.serializer`.
"""
from __future__ import annotations
from abc import ABC, abstractmethod


class SnapshotBackend(ABC):
    """Abstract snapshot backend.

    A backend owns at most one storage location and holds exactly one
    snapshot in it. Implementations must be safe to call `save` from
    several threads.
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying resource, creating it if absent."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Return True if no snapshot has ever been written."""

    @abstractmethod
    def load(self) -> bytes:
        """Return the full stored snapshot."""

    @abstractmethod
    def save(self, data: bytes) -> None:
        """Replace the stored snapshot with `data`."""

    @abstractmethod
    def flush(self) -> None:
        """Force previously saved bytes to durable storage."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release the underlying resource. Idempotent."""

    def abort(self) -> None:
        """Release the resource after a failed open, without flushing."""
        self.close()

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once `close` has run (or before `open`)."""
