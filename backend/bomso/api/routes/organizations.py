from fastapi import APIRouter, Depends, Request, status

from bomso.api.deps import get_dataset_store, require_admin
from bomso.api.response import envelope
from bomso.schemas.organization import Organization, OrganizationCreate
from bomso.services import organization_service
from bomso.storage import SnapshotStore

router = APIRouter(prefix="/organizations", tags=["organizations"], dependencies=[Depends(require_admin)])


def _out(row: Organization) -> dict:
    return row.model_dump(mode="json", by_alias=True)


@router.get("")
def list_organizations(request: Request, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    rows = organization_service.list_organizations(store)
    return envelope(request, {"items": [_out(row) for row in rows]})


@router.post("", status_code=status.HTTP_201_CREATED)
def create_organization(
    request: Request,
    body: OrganizationCreate,
    store: SnapshotStore = Depends(get_dataset_store),
) -> dict:
    row = organization_service.create_organization(store, body)
    return envelope(request, _out(row))


@router.get("/{org_code}")
def get_organization(request: Request, org_code: str, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    return envelope(request, _out(organization_service.get_organization(store, org_code)))


@router.post("/{org_code}/enable")
def enable_organization(request: Request, org_code: str, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    row = organization_service.enable_organization(store, org_code)
    return envelope(request, {"ok": True, "organization": _out(row)})


@router.post("/{org_code}/extend")
def extend_subscription(request: Request, org_code: str, store: SnapshotStore = Depends(get_dataset_store)) -> dict:
    row = organization_service.extend_one_month(store, org_code)
    return envelope(request, {"ok": True, "organization": _out(row)})
