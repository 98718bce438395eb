"""Snapshot backend for in-memory databases.

Nothing is persisted: saves are discarded and loads return an empty
snapshot. It exists so the database can treat both modes the same way.
"""
from .base import SnapshotBackend


class MemorySnapshotBackend(SnapshotBackend):
    def __init__(self) -> None:
        self._open = False

    @property
    def closed(self) -> bool:
        return not self._open

    def open(self) -> None:
        self._open = True

    def is_empty(self) -> bool:
        return True

    def load(self) -> bytes:
        return b""

    def save(self, data: bytes) -> None:
        return

    def flush(self) -> None:
        return

    def close(self) -> None:
        self._open = False
