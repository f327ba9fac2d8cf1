"""Approval of subscription requests and the resulting subscription window.

Approval always restarts the window at the approval instant; any time left
on a still-active subscription is discarded rather than carried over. Paid
tiers count 30-day blocks, unlike ``extend_one_month`` which moves the end
date by a calendar month.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging

from bomso.core.metrics import subscription_requests_total
from bomso.domain.dates import utcnow
from bomso.domain.errors import ValidationError
from bomso.schemas.dataset import Dataset
from bomso.schemas.organization import Organization, Subscription
from bomso.schemas.subscription_request import APPROVED, SubscriptionRequest
from bomso.services.request_service import require_pending, require_request
from bomso.services.unit_of_work import transact
from bomso.storage.base import SnapshotStore


logger = logging.getLogger("bomso.resolver")

TRIAL_TIER = 0
TRIAL_DAYS = 7
DAYS_PER_PAID_MONTH = 30


@dataclass(frozen=True)
class ApprovalResult:
    request: SubscriptionRequest
    # None when no organization with the request's orgCode exists yet.
    organization: Organization | None


def tier_label(selected_tier: int) -> str:
    return "trial" if selected_tier == TRIAL_TIER else f"{selected_tier}months"


def window_days(selected_tier: int) -> int:
    return TRIAL_DAYS if selected_tier == TRIAL_TIER else selected_tier * DAYS_PER_PAID_MONTH


def compute_subscription(selected_tier: int, now: datetime) -> Subscription:
    try:
        end_date = now + timedelta(days=window_days(selected_tier))
    except OverflowError as exc:
        raise ValidationError(
            "Subscription window ends past the supported date range",
            details={"selectedTier": selected_tier},
        ) from exc
    return Subscription(
        active=True,
        start_date=now,
        end_date=end_date,
        tier=tier_label(selected_tier),
    )


def apply_approval(dataset: Dataset, request_id: str, now: datetime) -> ApprovalResult:
    row = require_request(dataset, request_id)
    require_pending(row)
    row.status = APPROVED
    row.approved_at = now

    organization = dataset.find_organization(row.org_code)
    if organization is not None:
        organization.subscription = compute_subscription(row.selected_tier, now)
        organization.continue_enabled = True
    return ApprovalResult(request=row, organization=organization)


def approve_request(store: SnapshotStore, request_id: str, *, now: datetime | None = None) -> ApprovalResult:
    approved_at = now or utcnow()
    result = transact(store, lambda dataset: apply_approval(dataset, request_id, approved_at))
    subscription_requests_total.labels(status=APPROVED).inc()
    if result.organization is None:
        logger.warning(
            "request approved without a registered organization",
            extra={"subscription_request_id": request_id, "org_code": result.request.org_code},
        )
    else:
        logger.info(
            "subscription activated",
            extra={
                "subscription_request_id": request_id,
                "org_code": result.organization.org_code,
                "tier": result.organization.subscription.tier,
            },
        )
    return result
