from fastapi import APIRouter, Depends, Request

from bomso.api.deps import get_dataset_store
from bomso.api.response import envelope
from bomso.domain.errors import StorageError
from bomso.storage import SnapshotStore

router = APIRouter(tags=["ops"])


@router.get("/health")
def health(request: Request, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    try:
        store.load()
        storage_ok = True
    except StorageError:
        storage_ok = False
    return envelope(
        request,
        {
            "status": "ok" if storage_ok else "degraded",
            "storage": {"backend": store.backend_name, "available": storage_ok},
        },
    )
