"""
Error taxonomy shared by the HTTP adapter, the session store and the chat
workflows.

Categories
----------
- FormValidationError : caught before any network call, rendered inline.
- UnauthorizedError   : HTTP 401, globally intercepted (forced logout).
- ApiResponseError    : backend business error, carries the backend message.
- ApiConnectionError  : no response object at all (server unreachable).
- PDF heuristics      : `is_pdf_error` substring match on a backend message.

No error is fatal: callers store the message returned by `describe_error`
on their component state and stay interactive.
"""

from typing import Optional

CONNECTION_ERROR_MESSAGE = "Impossible de communiquer avec le serveur"
"""Message shown when the request never produced a response."""

GENERIC_ERROR_MESSAGE = "Une erreur est survenue"
"""Message shown when the backend answered without a `message` field."""


class AvocatAssistError(Exception):
    """Base class of every error raised by the client library."""


class FormValidationError(AvocatAssistError):
    """
    Raised when user input is rejected before any request is issued.

    Attributes
    ----------
    field_errors : dict[str, str]
        Field name to error message, as rendered next to each input.
    """

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__("; ".join(self.field_errors.values()))


class ApiError(AvocatAssistError):
    """
    Base class of HTTP failures.

    Attributes
    ----------
    message : str
        Text to show to the user.
    status_code : int | None
        HTTP status when a response was received.
    payload : dict | None
        Decoded JSON body of the error response, if any.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[dict] = None):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class ApiResponseError(ApiError):
    """The backend answered with a 4xx/5xx status."""


class UnauthorizedError(ApiResponseError):
    """The backend answered 401; the session is no longer valid."""


class ApiConnectionError(ApiError):
    """The request failed before any response was received."""

    def __init__(self, message: str = CONNECTION_ERROR_MESSAGE):
        super().__init__(message)


class ThreadResolutionError(AvocatAssistError):
    """No conversation thread could be resolved for an owner entity."""


def describe_error(exc: BaseException, fallback: str) -> str:
    """
    Return the message a view should display for `exc`.

    Backend-provided messages win; connectivity failures use the generic
    connectivity wording; anything else falls back to `fallback`.
    """
    if isinstance(exc, ApiResponseError) and exc.payload and exc.payload.get("message"):
        return str(exc.payload["message"])
    if isinstance(exc, ApiConnectionError):
        return exc.message
    if isinstance(exc, (FormValidationError, ThreadResolutionError)):
        return str(exc)
    return fallback


def is_pdf_error(message: Optional[str]) -> bool:
    """Heuristic: the backend reports PDF parsing problems only in free text."""
    return bool(message) and "PDF" in message
