"""
Shared fixtures: a throwaway SQLite file, a local object store in a temp dir
and TestClient helpers for two independent users.

Run with: pytest services/api/tests -v
"""
import os
import sys
import tempfile

_TMP = tempfile.mkdtemp(prefix="checklist-tests-")

# Settings are a process-wide singleton: configure before anything imports it.
os.environ["DB_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["OBJECT_STORAGE_BACKEND"] = "local"
os.environ["LOCAL_STORAGE_DIR"] = os.path.join(_TMP, "objects")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient

from adapters.local_fs import LocalObjectStorage
from core.db import Base, get_engine
from core.storage import set_object_storage
import models  # noqa: F401


@pytest.fixture(autouse=True)
def fresh_db():
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    store = LocalObjectStorage.from_dir(root=str(tmp_path / "objects"), bucket="Cards", secret="test-secret")
    set_object_storage(store)
    yield store
    set_object_storage(None)


@pytest.fixture
def app(storage):
    from main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def client(app):
    return TestClient(app)


def _signup_and_login(client: TestClient, email: str, password: str = "pw-123456") -> dict:
    r = client.post("/api/auth/signup", json={"email": email, "password": password, "name": email.split("@")[0]})
    assert r.status_code == 201, r.text
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    # Bearer header wins over the cookie, so two users can share one client
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth(client):
    return _signup_and_login(client, "alice@example.com")


@pytest.fixture
def other_auth(client):
    return _signup_and_login(client, "bob@example.com")


@pytest.fixture
def board_id(client, auth):
    r = client.get("/api/tasks", headers=auth)
    assert r.status_code == 200
    return r.json()["board_id"]


@pytest.fixture
def make_card(client, auth, board_id):
    def _make(title="Card", headers=None, board=None):
        r = client.post(
            "/api/cards",
            json={"title": title, "board_id": board or board_id},
            headers=headers or auth,
        )
        assert r.status_code == 201, r.text
        return r.json()
    return _make
