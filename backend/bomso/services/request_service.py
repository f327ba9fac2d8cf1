from __future__ import annotations

from datetime import datetime
import logging
import math
from typing import Any
import uuid

from bomso.core.metrics import subscription_requests_total
from bomso.domain.dates import utcnow
from bomso.domain.errors import InvalidStateError, NotFoundError, ValidationError
from bomso.schemas.dataset import Dataset
from bomso.schemas.subscription_request import (
    MAX_SELECTED_TIER,
    PENDING,
    REJECTED,
    SubscriptionRequest,
    SubscriptionRequestSubmit,
)
from bomso.services.unit_of_work import read_dataset, transact
from bomso.services.validation import clean_text, require_fields
from bomso.storage.base import SnapshotStore


logger = logging.getLogger("bomso.ledger")


def new_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_tier(value: Any) -> int:
    if value is None:
        raise ValidationError("Missing required fields", details={"missing": ["selectedTier"]})
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("selectedTier must be a non-negative integer", details={"selectedTier": repr(value)})
    if value > MAX_SELECTED_TIER:
        raise ValidationError(
            f"selectedTier must not exceed {MAX_SELECTED_TIER}",
            details={"selectedTier": value, "max": MAX_SELECTED_TIER},
        )
    return value


def _parse_price(value: Any) -> int | float:
    if value is None:
        return 0
    if not _is_number(value) or (isinstance(value, float) and not math.isfinite(value)) or value < 0:
        raise ValidationError("selectedPrice must be a finite non-negative number", details={"selectedPrice": repr(value)})
    return value


def require_pending(row: SubscriptionRequest) -> None:
    if row.status != PENDING:
        raise InvalidStateError(
            f"Request already {row.status}",
            details={"id": row.id, "status": row.status},
        )


def require_request(dataset: Dataset, request_id: str) -> SubscriptionRequest:
    row = dataset.find_request(request_id)
    if row is None:
        raise NotFoundError("Request not found", details={"id": request_id})
    return row


def submit_request(store: SnapshotStore, body: SubscriptionRequestSubmit, *, now: datetime | None = None) -> str:
    required = require_fields(
        {
            "orgCode": body.org_code,
            "orgName": body.org_name,
            "owner": body.owner,
            "phone": body.phone,
        }
    )
    row = SubscriptionRequest(
        id=new_request_id(),
        org_code=required["orgCode"],
        org_name=required["orgName"],
        owner=required["owner"],
        phone=required["phone"],
        email=clean_text(body.email),
        selected_tier=_parse_tier(body.selected_tier),
        selected_price=_parse_price(body.selected_price),
        timestamp=now or utcnow(),
        status=PENDING,
    )

    def _mutate(dataset: Dataset) -> str:
        # No check against organizations: requests may precede registration.
        dataset.requests.append(row.model_copy())
        return row.id

    request_id = transact(store, _mutate)
    subscription_requests_total.labels(status="submitted").inc()
    logger.info("subscription request saved", extra={"subscription_request_id": request_id, "org_code": row.org_code})
    return request_id


def list_requests(store: SnapshotStore, status: str | None = None) -> list[SubscriptionRequest]:
    rows = read_dataset(store).requests
    if status:
        return [row for row in rows if row.status == status]
    return rows


def get_request(store: SnapshotStore, request_id: str) -> SubscriptionRequest:
    return require_request(read_dataset(store), request_id)


def reject_request(store: SnapshotStore, request_id: str, *, now: datetime | None = None) -> SubscriptionRequest:
    rejected_at = now or utcnow()

    def _mutate(dataset: Dataset) -> SubscriptionRequest:
        row = require_request(dataset, request_id)
        require_pending(row)
        row.status = REJECTED
        row.rejected_at = rejected_at
        return row

    row = transact(store, _mutate)
    subscription_requests_total.labels(status=REJECTED).inc()
    logger.info("subscription request rejected", extra={"subscription_request_id": request_id, "org_code": row.org_code})
    return row
