import os
os.environ["APP_ENV"] = "test"

# THEN import anything else
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from bomso.api.deps import get_dataset_store
from bomso.core.config import get_settings
from bomso.schemas.organization import OrganizationCreate
from bomso.schemas.subscription_request import SubscriptionRequestSubmit
from bomso.storage.file_store import JsonFileStore


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "bomso.json"


@pytest.fixture()
def store(data_file: Path) -> JsonFileStore:
    return JsonFileStore(data_file)


@pytest.fixture()
def client(store: JsonFileStore) -> Generator[TestClient, None, None]:
    from bomso.main import app

    app.dependency_overrides[get_dataset_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/login", json={"password": get_settings().admin_password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


def org_body(org_code: str = "ORG-1", **overrides) -> OrganizationCreate:
    values = {
        "org_code": org_code,
        "org_name": "Acme School",
        "owner": "Dana Owner",
        "phone": "+994500000000",
        "email": "owner@acme.test",
        "udc": "UDC-7",
    }
    values.update(overrides)
    return OrganizationCreate(**values)


def request_body(org_code: str = "ORG-1", selected_tier=1, **overrides) -> SubscriptionRequestSubmit:
    values = {
        "org_code": org_code,
        "org_name": "Acme School",
        "owner": "Dana Owner",
        "phone": "+994500000000",
        "email": "owner@acme.test",
        "selected_tier": selected_tier,
        "selected_price": 25,
    }
    values.update(overrides)
    return SubscriptionRequestSubmit(**values)
