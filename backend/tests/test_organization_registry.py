from datetime import UTC, datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from bomso.domain.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from bomso.schemas.organization import Subscription
from bomso.services import organization_service
from bomso.services.unit_of_work import transact

from conftest import NOW, org_body


def _activate(store, org_code: str, start: datetime, end: datetime) -> None:
    def _mutate(dataset):
        organization = dataset.find_organization(org_code)
        organization.subscription = Subscription(active=True, start_date=start, end_date=end, tier="1months")

    transact(store, _mutate)


def test_create_organization_defaults(store):
    created = organization_service.create_organization(store, org_body(), now=NOW)

    assert created.org_code == "ORG-1"
    assert created.subscription == Subscription(active=False, start_date=None, end_date=None, tier=None)
    assert created.continue_enabled is False
    assert created.created_at == NOW
    assert organization_service.find_by_code(store, "ORG-1") == created


def test_create_organization_optional_fields_default_to_empty(store):
    created = organization_service.create_organization(store, org_body(email=None, udc=None))
    assert created.email == ""
    assert created.udc == ""


@pytest.mark.parametrize("field", ["org_code", "org_name", "owner", "phone"])
def test_create_organization_requires_fields(store, field):
    with pytest.raises(ValidationError) as excinfo:
        organization_service.create_organization(store, org_body(**{field: "   "}))
    assert excinfo.value.details["missing"]
    assert organization_service.list_organizations(store) == []


def test_duplicate_org_code_conflicts_and_keeps_single_record(store):
    organization_service.create_organization(store, org_body("DUP"))
    with pytest.raises(ConflictError):
        organization_service.create_organization(store, org_body("DUP", org_name="Other"))

    rows = [row for row in organization_service.list_organizations(store) if row.org_code == "DUP"]
    assert len(rows) == 1
    assert rows[0].org_name == "Acme School"


def test_org_code_match_is_case_sensitive(store):
    organization_service.create_organization(store, org_body("abc"))
    organization_service.create_organization(store, org_body("ABC"))
    assert [row.org_code for row in organization_service.list_organizations(store)] == ["abc", "ABC"]


def test_find_by_code_unknown_returns_none(store):
    assert organization_service.find_by_code(store, "missing") is None
    with pytest.raises(NotFoundError):
        organization_service.get_organization(store, "missing")


def test_enable_is_idempotent(store):
    organization_service.create_organization(store, org_body())
    first = organization_service.enable_organization(store, "ORG-1")
    second = organization_service.enable_organization(store, "ORG-1")
    assert first.continue_enabled is True
    assert second.continue_enabled is True
    assert second.subscription.active is False


def test_enable_unknown_org(store):
    with pytest.raises(NotFoundError):
        organization_service.enable_organization(store, "nope")


def test_extend_one_month_leap_year(store):
    organization_service.create_organization(store, org_body())
    _activate(store, "ORG-1", datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 31, tzinfo=UTC))

    extended = organization_service.extend_one_month(store, "ORG-1")

    assert extended.subscription.end_date == datetime(2024, 2, 29, tzinfo=UTC)
    assert extended.subscription.start_date == datetime(2024, 1, 1, tzinfo=UTC)
    assert organization_service.get_organization(store, "ORG-1").subscription.end_date == datetime(2024, 2, 29, tzinfo=UTC)


def test_extend_one_month_non_leap_year(store):
    organization_service.create_organization(store, org_body())
    _activate(store, "ORG-1", datetime(2023, 1, 1, tzinfo=UTC), datetime(2023, 1, 31, tzinfo=UTC))

    extended = organization_service.extend_one_month(store, "ORG-1")

    assert extended.subscription.end_date == datetime(2023, 2, 28, tzinfo=UTC)


def test_extend_inactive_subscription_rejected(store):
    organization_service.create_organization(store, org_body())
    with pytest.raises(InvalidStateError):
        organization_service.extend_one_month(store, "ORG-1")
    assert organization_service.get_organization(store, "ORG-1").subscription.active is False


def test_extend_past_last_supported_month_is_invalid_state(store):
    organization_service.create_organization(store, org_body())
    end = datetime(9999, 12, 15, tzinfo=UTC)
    _activate(store, "ORG-1", datetime(9999, 11, 15, tzinfo=UTC), end)

    with pytest.raises(InvalidStateError) as excinfo:
        organization_service.extend_one_month(store, "ORG-1")

    assert excinfo.value.details["orgCode"] == "ORG-1"
    assert organization_service.get_organization(store, "ORG-1").subscription.end_date == end


def test_extend_unknown_org(store):
    with pytest.raises(NotFoundError):
        organization_service.extend_one_month(store, "ghost")


@pytest.mark.parametrize(
    "fields",
    [
        {"start_date": NOW},
        {"end_date": NOW},
        {"tier": "3months"},
    ],
)
def test_inactive_subscription_carries_no_window(fields):
    with pytest.raises(PydanticValidationError):
        Subscription(active=False, **fields)
