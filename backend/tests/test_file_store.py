import json

import pytest

from bomso.domain.errors import ConflictError, StorageError
from bomso.schemas.dataset import Dataset
from bomso.services import organization_service, request_service
from bomso.storage.file_store import JsonFileStore

from conftest import NOW, org_body, request_body


def test_missing_file_loads_empty_dataset(store, data_file):
    snapshot = store.load()
    assert snapshot.dataset == Dataset()
    assert snapshot.revision is None
    assert not data_file.exists()


def test_empty_file_is_treated_as_bootstrap(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("")
    snapshot = JsonFileStore(data_file).load()
    assert snapshot.dataset.organizations == []
    assert snapshot.revision is None


def test_partial_document_fills_missing_collection(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(json.dumps({"organizations": []}))
    snapshot = JsonFileStore(data_file).load()
    assert snapshot.dataset.requests == []
    assert snapshot.revision is not None


def test_save_writes_single_document_layout(store, data_file):
    organization_service.create_organization(store, org_body(), now=NOW)
    request_service.submit_request(store, request_body(), now=NOW)

    document = json.loads(data_file.read_text())
    assert list(document) == ["organizations", "requests"]
    organization = document["organizations"][0]
    assert organization["orgCode"] == "ORG-1"
    assert organization["subscription"] == {"active": False, "startDate": None, "endDate": None, "tier": None}
    assert organization["continueEnabled"] is False
    assert organization["createdAt"] == "2024-03-01T12:00:00Z"
    request = document["requests"][0]
    assert request["status"] == "pending"
    assert request["selectedTier"] == 1
    assert "approvedAt" not in request and "rejectedAt" not in request


def test_stale_revision_conflicts_without_writing(store, data_file):
    organization_service.create_organization(store, org_body("A"))
    stale = store.load()
    organization_service.create_organization(store, org_body("B"))
    before = data_file.read_bytes()

    with pytest.raises(ConflictError):
        store.save(stale.dataset, stale.revision)

    assert data_file.read_bytes() == before


def test_first_write_conflicts_when_file_appeared(store):
    empty = store.load()
    organization_service.create_organization(store, org_body("A"))
    with pytest.raises(ConflictError):
        store.save(empty.dataset, empty.revision)


def test_save_load_round_trip_is_identity(store, data_file):
    organization_service.create_organization(store, org_body(), now=NOW)
    request_service.submit_request(store, request_body(), now=NOW)
    before = data_file.read_bytes()

    snapshot = store.load()
    revision = store.save(snapshot.dataset, snapshot.revision)

    assert data_file.read_bytes() == before
    assert revision == snapshot.revision


def test_invalid_json_is_storage_error(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json")
    with pytest.raises(StorageError):
        JsonFileStore(data_file).load()


def test_invalid_records_are_storage_error(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(json.dumps({"organizations": [{"orgCode": "X"}], "requests": []}))
    with pytest.raises(StorageError):
        JsonFileStore(data_file).load()


def test_write_failure_surfaces_storage_error(store, data_file, monkeypatch):
    def _fail(*_args, **_kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("bomso.storage.file_store.os.replace", _fail)
    with pytest.raises(StorageError):
        organization_service.create_organization(store, org_body())
    assert not data_file.exists()
    assert list(data_file.parent.iterdir()) == []
