"""Snapshot backend that keeps the whole store in one specific file.

The file is opened once, read-write, and held for the lifetime of the
database. Each save overwrites the file from offset zero and truncates it
to the new snapshot length so no bytes of an older, longer snapshot remain.
"""
from __future__ import annotations
import logging
import os
import threading
from pathlib import Path
from typing import BinaryIO, Optional

from .base import SnapshotBackend
from .errors import StorageIOError

logger = logging.getLogger(__name__)


class FileSnapshotBackend(SnapshotBackend):
    """Backend that targets a single on-disk file.

    Parameters
    - file_path: path to the snapshot file. The file and its parent
      directories are created on `open` if they do not exist.
    """

    def __init__(self, file_path: str | Path) -> None:
        self.file_path = Path(file_path)
        self._fh: Optional[BinaryIO] = None
        # Serializes access to the file handle between concurrent saves.
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._fh is None

    def _handle(self) -> BinaryIO:
        if self._fh is None:
            raise StorageIOError(f"snapshot file {self.file_path} is not open")
        return self._fh

    def open(self) -> None:
        if self._fh is not None:
            return
        try:
            if not self.file_path.parent.exists():
                os.makedirs(self.file_path.parent, exist_ok=True)
            # O_CREAT without O_TRUNC: "r+b" alone would fail on a missing file
            # and "w+b" would wipe an existing snapshot.
            fd = os.open(self.file_path, os.O_RDWR | os.O_CREAT, 0o666)
            self._fh = os.fdopen(fd, "r+b")
        except OSError as exc:
            raise StorageIOError(f"failed to open snapshot file {self.file_path}: {exc}") from exc
        logger.debug("FileSnapshotBackend opened %s", self.file_path)

    def is_empty(self) -> bool:
        with self._lock:
            try:
                return os.fstat(self._handle().fileno()).st_size == 0
            except OSError as exc:
                raise StorageIOError(f"failed to stat snapshot file {self.file_path}: {exc}") from exc

    def load(self) -> bytes:
        with self._lock:
            fh = self._handle()
            try:
                fh.seek(0)
                data = fh.read()
            except OSError as exc:
                raise StorageIOError(f"failed to read snapshot file {self.file_path}: {exc}") from exc
        logger.debug("FileSnapshotBackend loaded %s (%d bytes)", self.file_path, len(data))
        return data

    def save(self, data: bytes) -> None:
        with self._lock:
            fh = self._handle()
            try:
                fh.seek(0)
                fh.write(data)
                fh.truncate(len(data))
                fh.flush()
            except OSError as exc:
                raise StorageIOError(f"failed to write snapshot file {self.file_path}: {exc}") from exc
        logger.debug("FileSnapshotBackend wrote %s (%d bytes)", self.file_path, len(data))

    def flush(self) -> None:
        with self._lock:
            fh = self._handle()
            try:
                fh.flush()
                os.fsync(fh.fileno())
            except OSError as exc:
                raise StorageIOError(f"failed to sync snapshot file {self.file_path}: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            fh, self._fh = self._fh, None
            if fh is None:
                return
            try:
                try:
                    fh.flush()
                    os.fsync(fh.fileno())
                finally:
                    fh.close()
            except OSError as exc:
                raise StorageIOError(f"failed to close snapshot file {self.file_path}: {exc}") from exc
        logger.debug("FileSnapshotBackend closed %s", self.file_path)

    def abort(self) -> None:
        """Close the handle without syncing, used when opening fails midway."""
        with self._lock:
            fh, self._fh = self._fh, None
        if fh is not None:
            fh.close()
