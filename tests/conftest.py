import pytest
from fastapi.testclient import TestClient

from portfolio_api.main import create_app
from portfolio_api.repositories import InMemoryRecordStore
from portfolio_api.resources import build_clients
from portfolio_api.settings import Settings

ADMIN_PASSWORD = "s3cret"


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def clients(store):
    return build_clients(store)


@pytest.fixture
def settings():
    return Settings(admin_password=ADMIN_PASSWORD)


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings=settings, store=store)) as c:
        yield c


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {ADMIN_PASSWORD}"}
