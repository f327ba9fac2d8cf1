from __future__ import annotations

from collections.abc import Callable
import logging
from typing import TypeVar

from bomso.core.config import get_settings
from bomso.core.metrics import storage_conflicts_total
from bomso.domain.errors import ConflictError
from bomso.schemas.dataset import Dataset
from bomso.storage.base import SnapshotStore


logger = logging.getLogger("bomso.storage")

T = TypeVar("T")


def read_dataset(store: SnapshotStore) -> Dataset:
    return store.load().dataset


def transact(store: SnapshotStore, mutate: Callable[[Dataset], T], *, retries: int | None = None) -> T:
    """Load, mutate a private copy, then save it conditionally.

    Nothing is written when ``mutate`` raises. A revision conflict reloads
    the dataset and re-runs ``mutate`` up to ``retries`` more times, so every
    attempt works on fresh state. Storage failures propagate immediately.
    """
    if retries is None:
        retries = get_settings().storage_conflict_retries
    attempt = 0
    while True:
        snapshot = store.load()
        working = snapshot.dataset.model_copy(deep=True)
        result = mutate(working)
        try:
            store.save(working, snapshot.revision)
        except ConflictError:
            storage_conflicts_total.labels(backend=store.backend_name).inc()
            if attempt >= retries:
                raise
            attempt += 1
            logger.info("dataset revision moved, retrying", extra={"backend": store.backend_name})
            continue
        return result
