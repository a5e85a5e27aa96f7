"""
Duo Auth SDK Error Classes

Every failure a client call can surface is a ``DuoError``. Remote API
failures (``stat: FAIL``) carry Duo's numeric error code so callers can
branch on it.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class DuoError(Exception):
    """Base error class for the Duo Auth SDK."""

    def __init__(
        self,
        code: Any,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "name": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NetworkError(DuoError):
    """Network error (connection issues, timeouts, TLS failures)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, retryable: bool = True):
        super().__init__("NETWORK_ERROR", message, 0, details)
        self.retryable = retryable


class ResponseParseError(DuoError):
    """The response body was not the JSON the endpoint promises."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__("INVALID_RESPONSE", message, status_code, {"body": body[:200]})
        self.body = body


class ConfigurationError(DuoError):
    """Configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, 0, details)


class DuoAPIError(DuoError):
    """
    The API answered with ``stat: FAIL``.

    ``code`` is Duo's numeric error code (e.g. 40002), ``message_detail``
    usually names the offending parameter.
    """

    def __init__(
        self,
        code: Any,
        message: str,
        status_code: int,
        message_detail: Optional[str] = None,
    ):
        super().__init__(
            code,
            message,
            status_code,
            {"message_detail": message_detail} if message_detail else None,
        )
        self.message_detail = message_detail

    @classmethod
    def from_api_response(cls, response: Dict[str, Any], status_code: int) -> "DuoAPIError":
        """Create the matching error subclass from a ``stat: FAIL`` body."""
        error_cls = _ERRORS_BY_STATUS.get(status_code, cls)
        return error_cls(
            code=response.get("code", status_code),
            message=response.get("message", f"HTTP {status_code}"),
            status_code=status_code,
            message_detail=response.get("message_detail"),
        )

    def __str__(self) -> str:
        if self.message_detail:
            return f"{self.message}: {self.message_detail}"
        return self.message


class ValidationError(DuoAPIError):
    """Invalid or missing request parameters (HTTP 400)."""


class AuthenticationError(DuoAPIError):
    """Invalid integration key, signature or date header (HTTP 401)."""


class AuthorizationError(DuoAPIError):
    """The integration is not allowed to call this endpoint (HTTP 403)."""


class NotFoundError(DuoAPIError):
    """Unknown endpoint or resource, e.g. no logo configured (HTTP 404)."""


class RateLimitError(DuoAPIError):
    """Too many requests (HTTP 429)."""


_ERRORS_BY_STATUS = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    429: RateLimitError,
}


def is_duo_error(error: Any) -> bool:
    """Check if error is a DuoError."""
    return isinstance(error, DuoError)


def is_retryable_error(error: Any) -> bool:
    """
    Check whether re-issuing the same call could succeed.

    The SDK never retries on its own; this only informs caller policy,
    e.g. whether to poll ``auth_status`` again with the same txid.
    """
    if isinstance(error, NetworkError):
        return error.retryable
    if isinstance(error, RateLimitError):
        return False
    if isinstance(error, DuoAPIError):
        return 500 <= error.status_code < 600
    return False
