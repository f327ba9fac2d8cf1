from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from bomso.domain.errors import ValidationError
from bomso.schemas.organization import Organization
from bomso.schemas.subscription_request import SubscriptionRequest

DATASET_KEYS = ("organizations", "requests")


def validation_errors(exc: PydanticValidationError) -> list[dict[str, Any]]:
    # Rejected inputs are left out; they may not be JSON-encodable (NaN, Infinity).
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors(include_url=False)
    ]


class Dataset(BaseModel):
    """The whole persisted state: both collections, always written together."""

    organizations: list[Organization] = Field(default_factory=list)
    requests: list[SubscriptionRequest] = Field(default_factory=list)

    def find_organization(self, org_code: str) -> Organization | None:
        for organization in self.organizations:
            if organization.org_code == org_code:
                return organization
        return None

    def find_request(self, request_id: str) -> SubscriptionRequest | None:
        for row in self.requests:
            if row.id == request_id:
                return row
        return None

    def to_document(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "organizations": [row.model_dump(mode="json", by_alias=True) for row in self.organizations],
            "requests": [row.model_dump(mode="json", by_alias=True) for row in self.requests],
        }

    @classmethod
    def from_document(cls, document: Any) -> Dataset:
        if not isinstance(document, dict):
            raise ValidationError("Dataset document must be a JSON object")
        missing = [key for key in DATASET_KEYS if key not in document]
        if missing:
            raise ValidationError(
                f"Dataset document is missing required keys: {', '.join(missing)}",
                details={"missing": missing},
            )
        try:
            return cls.model_validate({key: document[key] for key in DATASET_KEYS})
        except PydanticValidationError as exc:
            raise ValidationError(
                "Dataset document failed validation",
                details={"errors": validation_errors(exc)},
            ) from exc
