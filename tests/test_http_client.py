import httpx
import pytest

from avocat_assist.api.errors import (
    CONNECTION_ERROR_MESSAGE,
    ApiConnectionError,
    ApiResponseError,
    UnauthorizedError,
    describe_error,
    is_pdf_error,
)
from avocat_assist.api.http_client import ApiClient

from conftest import API_URL


async def test_bearer_token_read_per_request(backend, transport):
    tokens = ["first"]
    backend.route("GET", "/projects", json=[])
    client = ApiClient(API_URL, credentials=lambda: tokens[0], transport=transport)
    try:
        await client.get("/projects")
        tokens[0] = None
        await client.get("/projects")
    finally:
        await client.aclose()

    first, second = backend.calls("GET", "/projects")
    assert first.headers["Authorization"] == "Bearer first"
    assert "Authorization" not in second.headers


async def test_unauthorized_invokes_callback_once_then_raises(backend, api):
    calls = []
    api.on_unauthorized = lambda: calls.append("401")
    backend.route("GET", "/chats/1", status=401, json={"message": "Token expiré"})

    with pytest.raises(UnauthorizedError) as excinfo:
        await api.get("/chats/1")

    assert calls == ["401"]
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Token expiré"


async def test_response_error_uses_backend_message_or_fallback(backend, api):
    errors = []
    api.on_error = errors.append
    backend.route("POST", "/chats", status=400, json={"message": "Titre requis"})
    backend.route("DELETE", "/chats/1", status=500, json={})

    with pytest.raises(ApiResponseError) as with_message:
        await api.post("/chats", json={})
    with pytest.raises(ApiResponseError) as without_message:
        await api.delete("/chats/1", fallback="Suppression impossible")

    assert with_message.value.message == "Titre requis"
    assert without_message.value.message == "Suppression impossible"
    assert errors == ["Titre requis", "Suppression impossible"]


async def test_transport_failure_is_connection_error(backend, api):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    backend.route("GET", "/conversations", unreachable)

    with pytest.raises(ApiConnectionError) as excinfo:
        await api.get("/conversations")

    assert excinfo.value.message == CONNECTION_ERROR_MESSAGE
    assert excinfo.value.status_code is None


async def test_download_returns_raw_bytes(backend, api):
    backend.route("GET", "/documents/5/download", lambda request: httpx.Response(200, content=b"%PDF-1.7"))

    assert await api.download("/documents/5/download") == b"%PDF-1.7"


def test_describe_error():
    assert describe_error(ApiResponseError("x", 400, {"message": "Erreur métier"}), "fallback") == "Erreur métier"
    assert describe_error(ApiConnectionError(), "fallback") == CONNECTION_ERROR_MESSAGE
    assert describe_error(RuntimeError("boom"), "fallback") == "fallback"


def test_is_pdf_error():
    assert is_pdf_error("Invalid PDF structure")
    assert not is_pdf_error("Fichier trop volumineux")
    assert not is_pdf_error(None)
