import json
import random
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from jose import jwt

from avocat_assist.api.http_client import ApiClient
from avocat_assist.api.models import ConversationThread, OwnerType
from avocat_assist.app import AvocatAssist
from avocat_assist.config.config import Settings
from avocat_assist.database.core.token_storage import MemoryTokenStorage

API_URL = "http://backend.test/api"


def make_token(minutes: int = 60, **claims) -> str:
    """Signed JWT expiring `minutes` from now (negative for an expired one)."""
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({"sub": "1", "exp": int(exp.timestamp()), **claims}, "test-secret", algorithm="HS256")


def user_payload(role: str = "client", user_id: int = 1, name: str = "Marie Dupont") -> dict:
    return {"id": user_id, "name": name, "email": "marie@example.com", "role": role}


class FakeBackend:
    """
    In-memory stand-in for the REST API, plugged in through httpx.MockTransport.

    Routes are keyed by (method, path) with the `/api` prefix removed.
    Unknown routes answer 404.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def route(self, method: str, path: str, handler=None, *, status: int = 200, json=None):
        if handler is None:
            def handler(request, _status=status, _json=json):
                return httpx.Response(_status, json=_json)
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, self.path_of(request)))
        if handler is None:
            return httpx.Response(404, json={"message": f"No route {request.method} {self.path_of(request)}"})
        return handler(request)

    @staticmethod
    def path_of(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/api"):] if path.startswith("/api") else path

    def calls(self, method: str, path: str) -> list:
        return [r for r in self.requests if r.method == method and self.path_of(r) == path]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def transport(backend):
    return httpx.MockTransport(backend)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        API_URL=API_URL,
        TOKEN_DB_URL="sqlite://",
        UPLOAD_PROGRESS_INTERVAL=0.001,
        DOWNLOAD_DIR=str(tmp_path / "downloads"),
    )


@pytest.fixture
async def api(transport):
    client = ApiClient(API_URL, credentials=lambda: "session-token", transport=transport)
    yield client
    await client.aclose()


@pytest.fixture
async def app(test_settings, transport):
    client = AvocatAssist.create(settings=test_settings, storage=MemoryTokenStorage(), transport=transport)
    yield client
    await client.aclose()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def project_thread():
    return ConversationThread(id=7, owner_entity_type=OwnerType.PROJECT, owner_entity_id=42, title="Dossier Bail")


@pytest.fixture
def standalone_thread():
    return ConversationThread(id=3, owner_entity_type=OwnerType.STANDALONE, title="Nouvelle conversation")
