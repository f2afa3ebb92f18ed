"""Gateway error taxonomy and HTTP response mapping."""

from __future__ import annotations

from typing import Any, ClassVar


_GENERIC_MESSAGE = "internal server error"


class GatewayError(Exception):
    """Base class for failures rendered as HTTP error responses."""

    status_code: ClassVar[int] = 500
    error_code: ClassVar[str] = "INTERNAL_ERROR"

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body."""
        return {"error": {"error_code": self.error_code, "message": self.message, "detail": self.detail}}


class InvalidRequestError(GatewayError):
    """Request body is not valid JSON or does not have the expected shape."""

    status_code = 400
    error_code = "INVALID_REQUEST"


class LockFailure(GatewayError):
    """Access to the shared store client could not be acquired."""

    error_code = "LOCK_FAILURE"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(_GENERIC_MESSAGE, detail=detail)


class BackendError(GatewayError):
    """The key-value backend returned an error or a malformed reply."""

    error_code = "BACKEND_FAILURE"

    def __init__(self, detail: str) -> None:
        super().__init__(f"backend failure: {detail}", detail=detail)


class KeyNotFoundError(BackendError):
    """Key has no value in the backend."""

    status_code = 404
    error_code = "KEY_NOT_FOUND"

    def __init__(self, key: str) -> None:
        super().__init__(f"key not found: {key!r}")
        self.key = key


class BackendUnavailableError(BackendError):
    """Backend could not be reached or did not answer in time."""

    status_code = 503
    error_code = "BACKEND_UNAVAILABLE"


def error_status(error: GatewayError, *, collapse_backend_errors: bool = False) -> int:
    """Return the HTTP status for an error.

    With ``collapse_backend_errors`` every backend failure maps to 500,
    matching clients that cannot tell a missing key from an unreachable
    backend.
    """
    if collapse_backend_errors and isinstance(error, BackendError):
        return 500
    return error.status_code


def internal_error_body() -> dict[str, Any]:
    """Return the body used for unexpected exceptions."""
    return {"error": {"error_code": GatewayError.error_code, "message": _GENERIC_MESSAGE, "detail": None}}
