from __future__ import annotations

from collections import Counter
import logging
from typing import Any

from bomso.domain.errors import ValidationError
from bomso.schemas.dataset import Dataset
from bomso.services.unit_of_work import read_dataset, transact
from bomso.storage.base import SnapshotStore


logger = logging.getLogger("bomso.dataset")

EXPORT_FILENAME = "bomso_backup.json"


def export_dataset(store: SnapshotStore) -> dict[str, list[dict[str, Any]]]:
    return read_dataset(store).to_document()


def _duplicates(values: list[str]) -> list[str]:
    return sorted(value for value, count in Counter(values).items() if count > 1)


def parse_import(document: Any) -> Dataset:
    dataset = Dataset.from_document(document)
    duplicate_codes = _duplicates([row.org_code for row in dataset.organizations])
    duplicate_ids = _duplicates([row.id for row in dataset.requests])
    if duplicate_codes or duplicate_ids:
        raise ValidationError(
            "Dataset document contains duplicate identities",
            details={"orgCodes": duplicate_codes, "requestIds": duplicate_ids},
        )
    return dataset


def import_dataset(store: SnapshotStore, document: Any) -> Dataset:
    """Replace the live dataset with ``document``. Nothing is merged."""
    incoming = parse_import(document)

    def _replace(dataset: Dataset) -> Dataset:
        dataset.organizations = incoming.organizations
        dataset.requests = incoming.requests
        return dataset

    replaced = transact(store, _replace)
    logger.info(
        "dataset imported",
        extra={"organizations": len(replaced.organizations), "requests": len(replaced.requests)},
    )
    return replaced
