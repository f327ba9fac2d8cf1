from datetime import datetime

from pydantic import Field, field_validator, model_validator

from bomso.schemas.base import CamelModel, as_utc


class Subscription(CamelModel):
    active: bool = False
    start_date: datetime | None = None
    end_date: datetime | None = None
    tier: str | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @model_validator(mode="after")
    def _active_window_is_complete(self) -> "Subscription":
        if not self.active:
            if self.start_date is not None or self.end_date is not None or self.tier is not None:
                raise ValueError("inactive subscription must not carry startDate, endDate or tier")
            return self
        if self.start_date is None or self.end_date is None:
            raise ValueError("active subscription requires startDate and endDate")
        if self.end_date <= self.start_date:
            raise ValueError("active subscription requires endDate after startDate")
        return self


class Organization(CamelModel):
    org_code: str
    org_name: str
    owner: str
    phone: str
    email: str = ""
    udc: str = ""
    subscription: Subscription = Field(default_factory=Subscription)
    continue_enabled: bool = False
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _normalize_tz(cls, value: datetime) -> datetime:
        return as_utc(value)


class OrganizationCreate(CamelModel):
    org_code: str | None = None
    org_name: str | None = None
    owner: str | None = None
    phone: str | None = None
    email: str | None = None
    udc: str | None = None
