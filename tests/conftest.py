import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so 'src' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SUPABASE_DISABLED", "1")
os.environ["USE_LOCAL_DB"] = "0"
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("ENV", "test")


@pytest.fixture(autouse=True)
def _clear_memory_store():
    from src.infrastructure.database.repositories import profile_repository, user_repository

    user_repository._MEM_USERS.clear()
    profile_repository._MEM_PROFILES.clear()
    yield


@pytest.fixture(scope="session")
def client() -> TestClient:
    # lazy import after env configured
    from src.main import create_app

    app = create_app()
    return TestClient(app)


@pytest.fixture()
def register(client):
    def _register(email="a@x.com", password="secret123", name="Ada Lovelace") -> str:
        r = client.post("/users", json={"name": name, "email": email, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["token"]

    return _register


@pytest.fixture()
def auth_header(register) -> dict[str, str]:
    return {"x-auth-token": register()}


@pytest.fixture()
def token_service():
    from src.infrastructure.api.dependencies import get_token_service

    return get_token_service()
