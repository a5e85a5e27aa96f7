"""
Duo Auth Python SDK

A Python client for the Duo Security Auth API v2 with sync and async
clients, signed requests, typed results and helpers for resolving
asynchronous (push) authentications.
"""

from .client import DuoAuthClient, DuoAuthAsyncClient, create_duo_client, create_async_duo_client
from .types import (
    DuoConfig,
    EnrollRequest,
    EnrollStatusRequest,
    PreAuthRequest,
    AuthRequest,
    AuthStatusRequest,
    PingResult,
    CheckResult,
    LogoResult,
    EnrollResult,
    EnrollStatusResult,
    Device,
    PreAuthResult,
    AuthResult,
    AuthTransaction,
    AuthStatusResult,
)
from .errors import (
    DuoError,
    NetworkError,
    ResponseParseError,
    ConfigurationError,
    DuoAPIError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RateLimitError,
    is_duo_error,
    is_retryable_error,
)
from .session import (
    AuthState,
    AuthSnapshot,
    start_auth,
    iter_auth_status,
    resolve_auth,
    astart_auth,
    aiter_auth_status,
    aresolve_auth,
)

__version__ = "0.1.0"
__all__ = [
    # Clients
    "DuoAuthClient",
    "DuoAuthAsyncClient",
    "create_duo_client",
    "create_async_duo_client",
    # Types
    "DuoConfig",
    "EnrollRequest",
    "EnrollStatusRequest",
    "PreAuthRequest",
    "AuthRequest",
    "AuthStatusRequest",
    "PingResult",
    "CheckResult",
    "LogoResult",
    "EnrollResult",
    "EnrollStatusResult",
    "Device",
    "PreAuthResult",
    "AuthResult",
    "AuthTransaction",
    "AuthStatusResult",
    # Errors
    "DuoError",
    "NetworkError",
    "ResponseParseError",
    "ConfigurationError",
    "DuoAPIError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitError",
    "is_duo_error",
    "is_retryable_error",
    # Async authentication lifecycle
    "AuthState",
    "AuthSnapshot",
    "start_auth",
    "iter_auth_status",
    "resolve_auth",
    "astart_auth",
    "aiter_auth_status",
    "aresolve_auth",
]
