import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shopfloor_web.config import Settings


@pytest.fixture
def api_client(tmp_path, monkeypatch):
    monkeypatch.setattr("shopfloor_web.auth.get_password_hash", lambda password: f"hashed:{password}")
    monkeypatch.setattr(
        "shopfloor_web.auth.verify_password",
        lambda plain, hashed: hashed == f"hashed:{plain}",
    )

    import server

    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        environment="test",
        secret_key="test-secret-key",
    )
    app = server.create_app(settings)
    with TestClient(app) as client:
        yield client, app


def _login(client: TestClient, username: str = "admin", password: str = "admin123") -> dict:
    res = client.post("/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    token = res.json()["access_token"]
    assert token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def login():
    """Return a helper that signs in and builds the Authorization header."""

    return _login


@pytest.fixture
def admin_headers(api_client):
    client, _ = api_client
    return _login(client)


@pytest.fixture
def user_headers(api_client):
    client, _ = api_client
    return _login(client, "user", "user123")
