# tests/conftest.py
import httpx
import pytest
import requests
from fastapi import FastAPI
from fastapi.testclient import TestClient

from azlok.client import ApiClient
from azlok.storage import TOKEN_KEY, LocalStorage
from demo_backend import database
from demo_backend.main import app as backend_app

BACKEND_URL = "http://backend"


class DownSession:
    """requests-compatible session whose backend is unreachable"""

    def request(self, method, url, **kwargs):
        raise requests.ConnectionError(f"connection refused: {url}")


def canned_app(body) -> FastAPI:
    """Backend that answers every call with the same 200 body"""
    canned = FastAPI()

    @canned.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    async def answer(path: str):
        return body

    return canned


def login_token(backend: TestClient, email: str, password: str) -> str:
    r = backend.post("/api/auth/login", data={"username": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


@pytest.fixture
def backend():
    database.seed()
    yield TestClient(backend_app, base_url=BACKEND_URL)
    database.reset()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def api(backend, storage):
    return ApiClient(
        base_url=BACKEND_URL,
        storage=storage,
        session=backend,
        async_transport=httpx.ASGITransport(app=backend_app),
    )


@pytest.fixture
def admin_token(backend):
    return login_token(backend, "admin@azlok.com", "admin123")


@pytest.fixture
def buyer_token(backend):
    return login_token(backend, "priya@example.com", "buyer123")


@pytest.fixture
def admin_api(api, storage, admin_token):
    storage.set_item(TOKEN_KEY, admin_token)
    return api


@pytest.fixture
def buyer_api(api, storage, buyer_token):
    storage.set_item(TOKEN_KEY, buyer_token)
    return api


@pytest.fixture
def down_api(storage):
    return ApiClient(base_url=BACKEND_URL, storage=storage, session=DownSession())


@pytest.fixture
def canned_api(storage):
    def make(body):
        session = TestClient(canned_app(body), base_url=BACKEND_URL)
        return ApiClient(base_url=BACKEND_URL, storage=storage, session=session)

    return make


@pytest.fixture
def guest_api(backend, tmp_path):
    """Signed-out client with its own storage, usable next to buyer_api/admin_api"""
    return ApiClient(base_url=BACKEND_URL, storage=LocalStorage(tmp_path / "guest.json"), session=backend)
