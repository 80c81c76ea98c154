import pytest
from fastapi.testclient import TestClient

from contactbook import config
from contactbook.main import app
from contactbook.store import ContactStore


@pytest.fixture
def store(tmp_path):
    with ContactStore(str(tmp_path / "contacts.sqlite")) as s:
        yield s


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DB_PATH", str(tmp_path / "api.sqlite"))
    with TestClient(app) as c:
        yield c
