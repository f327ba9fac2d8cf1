import math
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, field_validator, model_serializer

from bomso.schemas.base import CamelModel, as_utc

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
REQUEST_STATUSES = (PENDING, APPROVED, REJECTED)
TERMINAL_STATUSES = {APPROVED, REJECTED}

RequestStatus = Literal["pending", "approved", "rejected"]

# 100 years of paid months keeps every approval window inside datetime range.
MAX_SELECTED_TIER = 1200


class SubscriptionRequest(CamelModel):
    model_config = ConfigDict(allow_inf_nan=False)

    id: str
    org_code: str
    org_name: str
    owner: str
    phone: str
    email: str = ""
    selected_tier: int
    selected_price: int | float = 0
    timestamp: datetime
    status: RequestStatus = PENDING
    approved_at: datetime | None = None
    rejected_at: datetime | None = None

    @field_validator("selected_tier", mode="before")
    @classmethod
    def _tier_is_count(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("selectedTier must be an integer")
        return value

    @field_validator("selected_tier")
    @classmethod
    def _tier_not_negative(cls, value: int) -> int:
        if value < 0 or value > MAX_SELECTED_TIER:
            raise ValueError(f"selectedTier must be between 0 and {MAX_SELECTED_TIER}")
        return value

    @field_validator("selected_price")
    @classmethod
    def _price_not_negative(cls, value: int | float) -> int | float:
        if (isinstance(value, float) and not math.isfinite(value)) or value < 0:
            raise ValueError("selectedPrice must be a finite number >= 0")
        return value

    @field_validator("timestamp", "approved_at", "rejected_at")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @model_serializer(mode="wrap")
    def _omit_unset_transitions(self, handler) -> dict[str, Any]:
        # approvedAt / rejectedAt only exist once the matching transition happened.
        data = handler(self)
        for key in ("approvedAt", "rejectedAt", "approved_at", "rejected_at"):
            if key in data and data[key] is None:
                del data[key]
        return data


class SubscriptionRequestSubmit(CamelModel):
    org_code: str | None = None
    org_name: str | None = None
    owner: str | None = None
    phone: str | None = None
    email: str | None = None
    selected_tier: Any = None
    selected_price: Any = None
