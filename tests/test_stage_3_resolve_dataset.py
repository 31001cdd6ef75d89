import pytest

from conftest import API_BASE, FakeResponse
from _verify_action.errors import ApiError
from _verify_action.stage_3_resolve_dataset import resolve_dataset
from _verify_action.visihub_api_client import VisiHubAPI

DATASETS = "/api/desktop/repos/acme/warehouse/datasets"


@pytest.fixture
def api(fake_session):
    return VisiHubAPI(API_BASE, "key", session=fake_session)


def test_finds_existing_dataset(api, fake_session):
    fake_session.add("GET", DATASETS, FakeResponse(200, [
        {"id": 7, "name": "other.csv"},
        {"id": 9, "name": "sales.csv"},
    ]))

    assert resolve_dataset(api, "acme", "warehouse", "sales.csv") == {
        "dataset_id": 9,
        "created": False,
    }
    assert fake_session.calls_to("POST", DATASETS) == []


def test_first_match_wins_on_duplicate_names(api, fake_session):
    fake_session.add("GET", DATASETS, FakeResponse(200, [
        {"id": 3, "name": "sales.csv"},
        {"id": 4, "name": "sales.csv"},
    ]))

    assert resolve_dataset(api, "acme", "warehouse", "sales.csv")["dataset_id"] == 3


def test_match_is_exact(api, fake_session):
    fake_session.add("GET", DATASETS, FakeResponse(200, [{"id": 3, "name": "Sales.csv"}]))
    fake_session.add("POST", DATASETS, FakeResponse(201, {"dataset_id": 12}))

    result = resolve_dataset(api, "acme", "warehouse", "sales.csv")

    assert result == {"dataset_id": 12, "created": True}
    assert fake_session.calls_to("POST", DATASETS)[0]["json"] == {"name": "sales.csv"}


def test_list_failure_is_fatal(api, fake_session):
    fake_session.add("GET", DATASETS, FakeResponse(500, {}))

    with pytest.raises(ApiError, match="list datasets for acme/warehouse"):
        resolve_dataset(api, "acme", "warehouse", "sales.csv")


def test_create_failure_is_fatal(api, fake_session):
    fake_session.add("GET", DATASETS, FakeResponse(200, []))
    fake_session.add("POST", DATASETS, FakeResponse(403, {}))

    with pytest.raises(ApiError, match="create dataset"):
        resolve_dataset(api, "acme", "warehouse", "sales.csv")


@pytest.mark.parametrize("body", [{}, {"dataset_id": None}, {"dataset_id": ""}])
def test_create_without_id_is_fatal(api, fake_session, body):
    fake_session.add("GET", DATASETS, FakeResponse(200, []))
    fake_session.add("POST", DATASETS, FakeResponse(201, body))

    with pytest.raises(ApiError, match="dataset_id"):
        resolve_dataset(api, "acme", "warehouse", "sales.csv")


def test_first_name_match_without_id_creates_dataset(api, fake_session):
    fake_session.add("GET", DATASETS, FakeResponse(200, [
        {"id": None, "name": "sales.csv"},
        {"id": 7, "name": "sales.csv"},
    ]))
    fake_session.add("POST", DATASETS, FakeResponse(201, {"dataset_id": 12}))

    assert resolve_dataset(api, "acme", "warehouse", "sales.csv") == {
        "dataset_id": 12,
        "created": True,
    }
