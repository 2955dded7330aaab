import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("API_PREFIX", "/api")
os.environ.setdefault("SEED_ADMIN_EMAIL", "admin@agenda.com")
os.environ.setdefault("SEED_ADMIN_PASSWORD", "admin123")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from agenda.db.session import create_db_engine
from agenda.db.sql import SqlRepository
from agenda.main import create_app

ADMIN_EMAIL = "admin@agenda.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture()
def repo():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    repository = SqlRepository(engine)
    repository.prepare()
    yield repository
    engine.dispose()


@pytest.fixture()
def client(repo):
    app = create_app(repository=repo)
    with TestClient(app) as test_client:
        yield test_client


def _login(client, handle, password):
    return client.post("/api/auth/login", json={"handle": handle, "password": password})


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def login_headers(client):
    def _login_headers(handle, password):
        res = _login(client, handle, password)
        assert res.status_code == 200, res.text
        return _bearer(res.json()["token"])

    return _login_headers


@pytest.fixture()
def admin_headers(login_headers):
    return login_headers(ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture()
def user_headers(client, admin_headers, login_headers):
    res = client.post(
        "/api/users",
        json={"nome": "Operador", "email": "operador@agenda.com", "senha": "operador123"},
        headers=admin_headers,
    )
    assert res.status_code == 201, res.text
    return login_headers("operador@agenda.com", "operador123")
