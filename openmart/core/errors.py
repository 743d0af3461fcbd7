"""Error types raised by the OpenMart client and the transport failure classifier."""

from typing import Any, Optional

import requests


class OpenMartError(RuntimeError):
    """Raised for every failure surfaced by the client.

    ``code`` is a stable machine-readable identifier (server-provided when the API
    returned one), ``status_code`` the HTTP status if a response arrived and
    ``details`` whatever structured payload the server attached.
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, "
            f"status_code={self.status_code!r})"
        )


class ValidationError(OpenMartError, ValueError):
    """Raised before any I/O when a filter is malformed or out of range."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConfigError(OpenMartError):
    """Raised when mandatory configuration is missing or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIG_ERROR")


def _error_body(response: requests.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def classify(exc: BaseException) -> OpenMartError:
    """Map a transport failure onto a single ``OpenMartError``.

    Errors that are already classified are returned unchanged so their original
    code survives any number of call layers.
    """
    if isinstance(exc, OpenMartError):
        return exc

    response = getattr(exc, "response", None)
    if response is not None:
        body = _error_body(response)
        message = (
            body.get("detail")
            or body.get("error")
            or body.get("message")
            or str(exc)
            or "Unknown error occurred"
        )
        return OpenMartError(
            str(message),
            code=body.get("code") or "UNKNOWN_ERROR",
            status_code=response.status_code,
            details=body.get("details"),
        )

    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return OpenMartError("No response received from server", code="NETWORK_ERROR")

    return OpenMartError(str(exc) or "Request failed", code="REQUEST_ERROR")
