from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
import tempfile
import threading

from bomso.domain.errors import ConflictError, StorageError
from bomso.schemas.dataset import Dataset
from bomso.storage.base import Snapshot, SnapshotStore, decode_document, encode_document


logger = logging.getLogger("bomso.storage.file")


def _digest(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


class JsonFileStore(SnapshotStore):
    """Single JSON document on local disk, replaced atomically on every save."""

    backend_name = "file"

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_raw(self) -> bytes | None:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("dataset file unreadable", extra={"backend": self.backend_name, "path": str(self._path)})
            raise StorageError(f"Unable to read dataset file {self._path}") from exc
        return raw if raw.strip() else None

    def load(self) -> Snapshot:
        raw = self._read_raw()
        if raw is None:
            return Snapshot()
        return Snapshot(dataset=decode_document(raw, source=str(self._path)), revision=_digest(raw))

    def save(self, dataset: Dataset, expected_revision: str | None) -> str:
        payload = encode_document(dataset).encode("utf-8")
        with self._lock:
            current_raw = self._read_raw()
            current_revision = _digest(current_raw) if current_raw is not None else None
            if current_revision != expected_revision:
                raise ConflictError(
                    "Dataset changed since it was loaded; reload and retry",
                    details={"expected_revision": expected_revision, "current_revision": current_revision},
                )
            tmp_name: str | None = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
                with os.fdopen(fd, "wb") as handle:
                    handle.write(payload)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self._path)
            except OSError as exc:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)
                logger.error("dataset file write failed", extra={"backend": self.backend_name, "path": str(self._path)})
                raise StorageError(f"Unable to write dataset file {self._path}") from exc
        return _digest(payload)
