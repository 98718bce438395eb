"""Exception types raised by nsdb.

Every error derives from `NsdbError`. The concrete classes also inherit from
the closest builtin (`KeyError`, `ValueError`, `OSError`) so callers that
already handle those keep working.
"""
from __future__ import annotations


class NsdbError(Exception):
    """Base class for all nsdb errors."""


class NotFoundError(NsdbError, KeyError):
    """Raised when a namespace is absent or has no entries."""

    def __init__(self, namespace: str) -> None:
        super().__init__(namespace)
        self.namespace = namespace

    def __str__(self) -> str:
        return f"namespace {self.namespace!r} not found"


class DuplicateKeyError(NsdbError, ValueError):
    """Raised when a bulk write repeats a key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"duplicate key detected: {key!r}")
        self.key = key


class StorageIOError(NsdbError, OSError):
    """Raised when the backing file cannot be opened, read, written or closed."""


class CorruptSnapshotError(NsdbError):
    """Raised when a snapshot cannot be decoded into a store."""
