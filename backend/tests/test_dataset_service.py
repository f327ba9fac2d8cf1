import pytest

from bomso.domain.errors import ValidationError
from bomso.services import dataset_service, organization_service, request_service, subscription_service

from conftest import NOW, org_body, request_body


def _seed(store) -> None:
    organization_service.create_organization(store, org_body("A"), now=NOW)
    organization_service.create_organization(store, org_body("B"), now=NOW)
    approved = request_service.submit_request(store, request_body("A", selected_tier=3), now=NOW)
    request_service.submit_request(store, request_body("ORPHAN", selected_tier=0), now=NOW)
    subscription_service.approve_request(store, approved, now=NOW)


def test_export_then_import_reproduces_dataset(store):
    _seed(store)
    exported = dataset_service.export_dataset(store)

    dataset_service.import_dataset(store, exported)

    assert dataset_service.export_dataset(store) == exported


def test_export_uses_camel_case_iso_layout(store):
    _seed(store)
    document = dataset_service.export_dataset(store)

    organization = document["organizations"][0]
    assert organization["subscription"] == {
        "active": True,
        "startDate": "2024-03-01T12:00:00Z",
        "endDate": "2024-05-30T12:00:00Z",
        "tier": "3months",
    }
    assert document["requests"][0]["approvedAt"] == "2024-03-01T12:00:00Z"
    assert "approvedAt" not in document["requests"][1]


def test_import_replaces_rather_than_merges(store):
    _seed(store)
    replacement = {
        "organizations": [
            {
                "orgCode": "NEW",
                "orgName": "New Org",
                "owner": "Owner",
                "phone": "1",
                "createdAt": "2024-01-31T00:00:00.000Z",
            }
        ],
        "requests": [],
    }

    dataset_service.import_dataset(store, replacement)

    assert [row.org_code for row in organization_service.list_organizations(store)] == ["NEW"]
    assert request_service.list_requests(store) == []
    imported = organization_service.get_organization(store, "NEW")
    assert imported.subscription.active is False
    assert imported.email == ""


@pytest.mark.parametrize("document", [{"organizations": []}, {"requests": []}, {}, [], "nope"])
def test_import_requires_both_collections(store, document):
    _seed(store)
    before = dataset_service.export_dataset(store)

    with pytest.raises(ValidationError):
        dataset_service.import_dataset(store, document)

    assert dataset_service.export_dataset(store) == before


def test_import_rejects_duplicate_identities(store):
    organization = {"orgCode": "X", "orgName": "X", "owner": "o", "phone": "p", "createdAt": "2024-01-01T00:00:00Z"}
    with pytest.raises(ValidationError) as excinfo:
        dataset_service.import_dataset(store, {"organizations": [organization, organization], "requests": []})
    assert excinfo.value.details["orgCodes"] == ["X"]


def test_import_rejects_inconsistent_subscription(store):
    organization = {
        "orgCode": "X",
        "orgName": "X",
        "owner": "o",
        "phone": "p",
        "createdAt": "2024-01-01T00:00:00Z",
        "subscription": {"active": True, "startDate": "2024-02-01T00:00:00Z", "endDate": None, "tier": "trial"},
    }
    with pytest.raises(ValidationError):
        dataset_service.import_dataset(store, {"organizations": [organization], "requests": []})


def test_import_rejects_inactive_subscription_with_window(store):
    organization = {
        "orgCode": "X",
        "orgName": "X",
        "owner": "o",
        "phone": "p",
        "createdAt": "2024-01-01T00:00:00Z",
        "subscription": {"active": False, "startDate": "2024-02-01T00:00:00Z", "endDate": None, "tier": "3months"},
    }
    with pytest.raises(ValidationError):
        dataset_service.import_dataset(store, {"organizations": [organization], "requests": []})


@pytest.mark.parametrize(
    "overrides",
    [
        {"selectedPrice": float("nan")},
        {"selectedPrice": float("inf")},
        {"selectedTier": 200000},
    ],
)
def test_import_rejects_requests_that_cannot_round_trip(store, overrides):
    _seed(store)
    before = dataset_service.export_dataset(store)
    row = {**before["requests"][1], **overrides}

    with pytest.raises(ValidationError) as excinfo:
        dataset_service.import_dataset(store, {"organizations": [], "requests": [row]})

    assert all("input" not in error for error in excinfo.value.details["errors"])
    assert dataset_service.export_dataset(store) == before
