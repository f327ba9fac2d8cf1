from __future__ import annotations

from datetime import datetime
import logging

from bomso.domain.dates import add_months, utcnow
from bomso.domain.errors import ConflictError, InvalidStateError, NotFoundError
from bomso.schemas.dataset import Dataset
from bomso.schemas.organization import Organization, OrganizationCreate, Subscription
from bomso.services.unit_of_work import read_dataset, transact
from bomso.services.validation import clean_text, require_fields
from bomso.storage.base import SnapshotStore


logger = logging.getLogger("bomso.registry")


def _require_organization(dataset: Dataset, org_code: str) -> Organization:
    organization = dataset.find_organization(org_code)
    if organization is None:
        raise NotFoundError("Organization not found", details={"orgCode": org_code})
    return organization


def list_organizations(store: SnapshotStore) -> list[Organization]:
    return read_dataset(store).organizations


def find_by_code(store: SnapshotStore, org_code: str) -> Organization | None:
    return read_dataset(store).find_organization(org_code)


def get_organization(store: SnapshotStore, org_code: str) -> Organization:
    return _require_organization(read_dataset(store), org_code)


def create_organization(store: SnapshotStore, body: OrganizationCreate, *, now: datetime | None = None) -> Organization:
    required = require_fields(
        {
            "orgCode": body.org_code,
            "orgName": body.org_name,
            "owner": body.owner,
            "phone": body.phone,
        }
    )
    created_at = now or utcnow()

    def _mutate(dataset: Dataset) -> Organization:
        if dataset.find_organization(required["orgCode"]) is not None:
            raise ConflictError("Organization code already exists", details={"orgCode": required["orgCode"]})
        organization = Organization(
            org_code=required["orgCode"],
            org_name=required["orgName"],
            owner=required["owner"],
            phone=required["phone"],
            email=clean_text(body.email),
            udc=clean_text(body.udc),
            subscription=Subscription(),
            continue_enabled=False,
            created_at=created_at,
        )
        dataset.organizations.append(organization)
        return organization

    organization = transact(store, _mutate)
    logger.info("organization registered", extra={"org_code": organization.org_code})
    return organization


def enable_organization(store: SnapshotStore, org_code: str) -> Organization:
    def _mutate(dataset: Dataset) -> Organization:
        organization = _require_organization(dataset, org_code)
        organization.continue_enabled = True
        return organization

    organization = transact(store, _mutate)
    logger.info("organization continue enabled", extra={"org_code": org_code})
    return organization


def extend_one_month(store: SnapshotStore, org_code: str) -> Organization:
    def _mutate(dataset: Dataset) -> Organization:
        organization = _require_organization(dataset, org_code)
        current = organization.subscription
        if not current.active or current.end_date is None:
            raise InvalidStateError("No active subscription", details={"orgCode": org_code})
        try:
            end_date = add_months(current.end_date, 1)
        except OverflowError as exc:
            raise InvalidStateError(
                "Subscription end date cannot be extended further",
                details={"orgCode": org_code, "endDate": current.end_date.isoformat()},
            ) from exc
        organization.subscription = current.model_copy(update={"end_date": end_date})
        return organization

    organization = transact(store, _mutate)
    logger.info(
        "subscription extended by one month",
        extra={"org_code": org_code, "end_date": organization.subscription.end_date},
    )
    return organization
