"""
HTTP Client Adapter — httpx
===========================

Purpose
-------
Single entry point for every outbound call to the AvocatAssist REST API:
- Injects `Authorization: Bearer <token>` through one `httpx.Auth`
  implementation fed by one credential provider.
- Centralizes 401 handling: the `on_unauthorized` callback fires whichever
  screen issued the request.
- Maps transport failures and 4xx/5xx answers onto the error taxonomy of
  `avocat_assist.api.errors`.

Key Notes
---------
- The client is an explicit value built by the composition root and passed to
  the session store and workflows. Nothing here is process-wide state.
- No retries. A failed request raises once and the caller decides what to show.
- Suspension points are the awaited httpx calls only.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from avocat_assist.api.errors import (
    ApiConnectionError,
    ApiResponseError,
    GENERIC_ERROR_MESSAGE,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

CredentialProvider = Callable[[], Optional[str]]
"""Zero-argument callable returning the current bearer token (or None)."""


class BearerTokenAuth(httpx.Auth):
    """
    httpx authentication flow adding the bearer token at request time.

    The token is read from the provider for each request, so a login or a
    logout is picked up by the next call without touching the client.
    """

    def __init__(self, credentials: CredentialProvider):
        self._credentials = credentials

    def auth_flow(self, request: httpx.Request):
        token = self._credentials()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


class ApiClient:
    """
    Thin asynchronous REST client.

    Parameters
    ----------
    base_url : str
        API root, e.g. ``http://localhost:5050/api``.
    credentials : CredentialProvider
        The single source of the bearer token.
    on_unauthorized : callable, optional
        Invoked (no arguments) on every 401 answer before the error is raised.
    on_error : callable, optional
        Invoked with the user-facing message of every failure.
    timeout : float
        Request timeout in seconds.
    transport : httpx.AsyncBaseTransport, optional
        Custom transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        on_unauthorized: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.on_unauthorized = on_unauthorized
        self.on_error = on_error
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=BearerTokenAuth(credentials),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
        fallback: str = GENERIC_ERROR_MESSAGE,
    ) -> httpx.Response:
        """
        Send a request and return the successful response.

        Raises
        ------
        UnauthorizedError
            On HTTP 401, after `on_unauthorized` has run.
        ApiResponseError
            On any other 4xx/5xx; the message is the backend `message` field
            or `fallback`.
        ApiConnectionError
            When no response was received.
        """
        try:
            response = await self._client.request(
                method, path, params=params, json=json, data=data, files=files
            )
        except httpx.RequestError as e:
            logger.warning("%s %s failed without response: %s", method, path, e)
            error = ApiConnectionError()
            self._report(error.message)
            raise error from e

        if response.is_success:
            return response

        payload = _error_payload(response)
        message = (payload or {}).get("message") or fallback
        if response.status_code == 401:
            logger.info("%s %s answered 401, session is no longer valid", method, path)
            error = UnauthorizedError(message, response.status_code, payload)
            if self.on_unauthorized is not None:
                self.on_unauthorized()
        else:
            logger.warning("%s %s answered %s: %s", method, path, response.status_code, message)
            error = ApiResponseError(message, response.status_code, payload)
        self._report(error.message)
        raise error

    async def request_json(self, method: str, path: str, json: Any = None, fallback: str = GENERIC_ERROR_MESSAGE) -> Any:
        return _decode(await self.request(method, path, json=json, fallback=fallback))

    async def get(self, path: str, params: Optional[dict] = None, fallback: str = GENERIC_ERROR_MESSAGE) -> Any:
        return _decode(await self.request("GET", path, params=params, fallback=fallback))

    async def post(self, path: str, json: Any = None, fallback: str = GENERIC_ERROR_MESSAGE) -> Any:
        return _decode(await self.request("POST", path, json=json, fallback=fallback))

    async def put(self, path: str, json: Any = None, fallback: str = GENERIC_ERROR_MESSAGE) -> Any:
        return _decode(await self.request("PUT", path, json=json, fallback=fallback))

    async def delete(self, path: str, fallback: str = GENERIC_ERROR_MESSAGE) -> Any:
        return _decode(await self.request("DELETE", path, fallback=fallback))

    async def upload(self, path: str, files: dict, data: Optional[dict] = None, fallback: str = GENERIC_ERROR_MESSAGE) -> Any:
        """POST a multipart/form-data body (httpx sets the boundary header)."""
        return _decode(await self.request("POST", path, files=files, data=data, fallback=fallback))

    async def download(self, path: str, fallback: str = GENERIC_ERROR_MESSAGE) -> bytes:
        """GET a binary body."""
        response = await self.request("GET", path, fallback=fallback)
        return response.content

    def _report(self, message: str) -> None:
        if self.on_error is not None:
            self.on_error(message)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_payload(response: httpx.Response) -> Optional[dict]:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None
