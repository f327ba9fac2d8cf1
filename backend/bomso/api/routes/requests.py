from fastapi import APIRouter, Depends, Query, Request, status

from bomso.api.deps import get_dataset_store, require_admin
from bomso.api.response import envelope
from bomso.schemas.subscription_request import SubscriptionRequest, SubscriptionRequestSubmit
from bomso.services import request_service, subscription_service
from bomso.storage import SnapshotStore

router = APIRouter(prefix="/requests", tags=["requests"])


def _out(row: SubscriptionRequest) -> dict:
    return row.model_dump(mode="json", by_alias=True)


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_request(
    request: Request,
    body: SubscriptionRequestSubmit,
    store: SnapshotStore = Depends(get_dataset_store),
) -> dict:
    request_id = request_service.submit_request(store, body)
    return envelope(request, {"id": request_id})


@router.get("", dependencies=[Depends(require_admin)])
def list_requests(
    request: Request,
    status_filter: str | None = Query(default=None, alias="status"),
    store: SnapshotStore = Depends(get_dataset_store),
) -> dict:
    rows = request_service.list_requests(store, status_filter)
    return envelope(request, {"items": [_out(row) for row in rows]})


@router.get("/{request_id}", dependencies=[Depends(require_admin)])
def get_request(request: Request, request_id: str, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    return envelope(request, _out(request_service.get_request(store, request_id)))


@router.post("/{request_id}/approve", dependencies=[Depends(require_admin)])
def approve_request(request: Request, request_id: str, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    result = subscription_service.approve_request(store, request_id)
    organization = result.organization.model_dump(mode="json", by_alias=True) if result.organization else None
    return envelope(request, {"ok": True, "request": _out(result.request), "organization": organization})


@router.post("/{request_id}/reject", dependencies=[Depends(require_admin)])
def reject_request(request: Request, request_id: str, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    row = request_service.reject_request(store, request_id)
    return envelope(request, {"ok": True, "request": _out(row)})
