from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from bomso.api.deps import get_dataset_store, require_admin
from bomso.api.response import envelope
from bomso.services import dataset_service
from bomso.storage import SnapshotStore

router = APIRouter(tags=["dataset"], dependencies=[Depends(require_admin)])


@router.get("/export")
def export_dataset(store: SnapshotStore = Depends(get_dataset_store)) -> JSONResponse:
    document = dataset_service.export_dataset(store)
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f"attachment; filename={dataset_service.EXPORT_FILENAME}"},
    )


@router.post("/import")
def import_dataset(
    request: Request,
    document: Any = Body(...),
    store: SnapshotStore = Depends(get_dataset_store),
) -> dict:
    dataset = dataset_service.import_dataset(store, document)
    return envelope(
        request,
        {"ok": True, "organizations": len(dataset.organizations), "requests": len(dataset.requests)},
    )
