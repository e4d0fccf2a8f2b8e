# tests/conftest.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from config.settings import Settings, get_settings
from main import create_app
from store.couch import CouchClient

from .fakes import JWT_SECRET, STORE_PASSWORD, STORE_URL, STORE_USER, FakeCouch


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url=STORE_URL,
        db_username=STORE_USER,
        db_password=STORE_PASSWORD,
        jwt_secret=JWT_SECRET,
        auth_db="users",
    )


@pytest.fixture()
def couch() -> FakeCouch:
    fake = FakeCouch()
    fake.dbs["users"] = {}
    return fake


@pytest.fixture()
def app(settings: Settings, couch: FakeCouch):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.state.couch = CouchClient(couch.client())
    return application


@pytest.fixture()
def client(app):
    # https so the Secure session cookie is kept and sent back
    with TestClient(app, base_url="https://testserver") as c:
        yield c


@pytest.fixture()
def make_client(app):
    """Extra clients with their own cookie jars."""
    opened = []

    def _make() -> TestClient:
        c = TestClient(app, base_url="https://testserver")
        opened.append(c)
        return c

    yield _make
    for c in opened:
        c.close()
