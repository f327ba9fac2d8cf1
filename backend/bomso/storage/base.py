from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import json
from typing import Any

from bomso.domain.errors import StorageError, ValidationError
from bomso.schemas.dataset import Dataset


@dataclass(frozen=True)
class Snapshot:
    dataset: Dataset = field(default_factory=Dataset)
    # Opaque token for the stored state; None means nothing has been written yet.
    revision: str | None = None


class SnapshotStore(ABC):
    """Load/save contract over the full {organizations, requests} document.

    ``save`` is conditional: it writes only when the stored revision still
    equals ``expected_revision`` and raises ``ConflictError`` otherwise.
    """

    backend_name = "abstract"

    @abstractmethod
    def load(self) -> Snapshot:
        raise NotImplementedError

    @abstractmethod
    def save(self, dataset: Dataset, expected_revision: str | None) -> str:
        raise NotImplementedError


def encode_document(dataset: Dataset) -> str:
    return json.dumps(dataset.to_document(), indent=2, ensure_ascii=False)


def decode_document(raw: str | bytes, *, source: str) -> Dataset:
    try:
        document: Any = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Stored dataset at {source} is not valid JSON") from exc
    if not isinstance(document, dict):
        raise StorageError(f"Stored dataset at {source} is not a JSON object")
    # Partially bootstrapped documents are treated as empty collections.
    document.setdefault("organizations", [])
    document.setdefault("requests", [])
    try:
        return Dataset.from_document(document)
    except ValidationError as exc:
        raise StorageError(f"Stored dataset at {source} failed validation", details=exc.details) from exc
