from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from workforce_api.api.server import create_app
from workforce_api.config import Config


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin"


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def make_config(tmp_path, **overrides: Any) -> Config:
    values: Dict[str, Any] = {
        "DB_DSN": str(tmp_path / "workforce-test.sqlite"),
        "AUTH_JWT_SECRET": "test-secret",
        "AUTH_BOOTSTRAP_ADMIN_EMAIL": ADMIN_EMAIL,
        "AUTH_BOOTSTRAP_ADMIN_PASSWORD": ADMIN_PASSWORD,
    }
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def cfg(tmp_path) -> Config:
    return make_config(tmp_path)


@pytest.fixture
def client(cfg):
    with TestClient(create_app(cfg)) as c:
        yield c


@pytest.fixture
def protected_client(tmp_path):
    with TestClient(create_app(make_config(tmp_path, AUTH_PROTECT_RESOURCES=True))) as c:
        yield c


def login(client: TestClient, email: str, password: str) -> str:
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def register_and_login(client: TestClient, username: str = "alice") -> str:
    email = f"{username}@example.com"
    r = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": "s3cret-pass"},
    )
    assert r.status_code == 201, r.text
    return login(client, email, "s3cret-pass")


@pytest.fixture
def admin_token(client) -> str:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def user_token(client) -> str:
    return register_and_login(client)


def create(client: TestClient, plural: str, body: Dict[str, Any], headers=None) -> int:
    r = client.post(f"/api/{plural}", json=body, headers=headers or {})
    assert r.status_code == 201, r.text
    return int(r.json()["id"])


@pytest.fixture
def department_id(client) -> int:
    return create(client, "departments", {"code": "ENG", "name": "Engineering"})


@pytest.fixture
def shift_id(client) -> int:
    return create(
        client,
        "shifts",
        {
            "name": "Morning",
            "start_time": "09:00",
            "end_time": "17:00",
            "total_minutes": 480,
            "is_overnight": False,
        },
    )


def new_employee(client: TestClient, department_id: int, name: str, *, status: str = "active") -> int:
    slug = name.lower().replace(" ", ".")
    return create(
        client,
        "employees",
        {
            "name": name,
            "email": f"{slug}@corp.example",
            "title": "Engineer",
            "status": status,
            "department_id": department_id,
        },
    )
