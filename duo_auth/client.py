"""
Duo Auth SDK Client

Synchronous and asynchronous clients for the Duo Auth API v2. Each
operation signs one request, sends it and maps the answer to the
operation's own result type. Clients keep no per-transaction state and
never retry; see ``duo_auth.session`` for driving asynchronous
authentications to completion.
"""

import logging
from typing import Any, Dict, Literal, Optional, Tuple, Union

import httpx

from .errors import (
    DuoAPIError,
    NetworkError,
    ResponseParseError,
)
from .signing import canonicalize_params, signed_headers
from .types import (
    AuthRequest,
    AuthResult,
    AuthStatusRequest,
    AuthStatusResult,
    AuthTransaction,
    CheckResult,
    DuoConfig,
    EnrollRequest,
    EnrollResult,
    EnrollStatusRequest,
    EnrollStatusResult,
    LogoResult,
    PingResult,
    PreAuthRequest,
    PreAuthResult,
)


logger = logging.getLogger("duo_auth")

HttpMethod = Literal["GET", "POST"]

# Headers computed per request; configured extra headers may not replace them
_RESERVED_HEADERS = {"authorization", "date", "host", "content-type"}


def _prepare_request(
    config: DuoConfig,
    method: str,
    path: str,
    params: Dict[str, str],
) -> Tuple[str, Dict[str, str], Optional[bytes]]:
    """Sign a request and lay out its URL, headers and body."""
    encoded = canonicalize_params(params)
    headers: Dict[str, str] = {
        key: value
        for key, value in (config.headers or {}).items()
        if key.lower() not in _RESERVED_HEADERS
    }
    headers["User-Agent"] = config.user_agent
    headers.update(signed_headers(
        method, config.host, path, params, config.ikey, config.skey, config.digestmod,
    ))

    url = f"https://{config.host}{path}"
    content: Optional[bytes] = None
    if method == "POST":
        headers["Content-Type"] = "application/x-www-form-urlencoded"
        content = encoded.encode("utf-8")
    elif encoded:
        url = f"{url}?{encoded}"
    return url, headers, content


def _parse_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ResponseParseError(
            f"Expected JSON from {response.request.url.path}, got "
            f"{response.headers.get('content-type', 'no content type')}",
            response.status_code,
            response.text,
        ) from e


def _handle_response(response: httpx.Response) -> Any:
    """Unwrap the ``stat``/``response`` envelope or raise the API error."""
    content_type = response.headers.get("content-type", "")
    if not response.is_success and "json" not in content_type:
        # Proxy and gateway failures come back as HTML or plain text
        raise DuoAPIError.from_api_response(
            {"message": response.reason_phrase or f"HTTP {response.status_code}"},
            response.status_code,
        )

    data = _parse_json(response)
    if not isinstance(data, dict) or "stat" not in data:
        raise ResponseParseError(
            "Response is not a Duo API envelope", response.status_code, response.text
        )

    if data["stat"] == "OK":
        if "response" not in data:
            raise ResponseParseError(
                "Response envelope has no 'response' member",
                response.status_code,
                response.text,
            )
        return data["response"]

    raise DuoAPIError.from_api_response(data, response.status_code)


def _expect_payload(response: httpx.Response, kind: type = dict) -> Any:
    """Unwrap the envelope and check the JSON type of its ``response`` member."""
    payload = _handle_response(response)
    if not isinstance(payload, kind):
        raise ResponseParseError(
            f"Expected a {kind.__name__} payload from {response.request.url.path}",
            response.status_code,
            response.text,
        )
    return payload


def _handle_logo_response(response: httpx.Response) -> Union[LogoResult, Dict[str, Any]]:
    """Pass image bytes through; anything else is a regular JSON answer."""
    content_type = response.headers.get("content-type", "")
    if response.is_success and content_type.startswith("image/"):
        return LogoResult(content=response.content, content_type=content_type)
    return _expect_payload(response)


def _auth_outcome(
    request: AuthRequest, response: httpx.Response
) -> Union[AuthResult, AuthTransaction]:
    payload = _expect_payload(response)
    if not request.async_txn:
        return AuthResult.from_dict(payload)
    if not payload.get("txid"):
        raise ResponseParseError(
            "Asynchronous auth response has no txid", response.status_code, response.text
        )
    return AuthTransaction.from_dict(payload)


class DuoAuthClient:
    """
    Duo Auth Client - Synchronous SDK entry point.

    Every call blocks until the API answers. ``auth_status`` is a
    long-poll, so leave ``DuoConfig.timeout`` unset or generous.
    """

    def __init__(self, config: DuoConfig) -> None:
        """Initialize the Duo Auth client."""
        config.validate()
        self._config = config
        self._debug = config.debug

        # HTTP client
        self._http_client = httpx.Client(timeout=config.timeout)

        self._log(f"DuoAuthClient initialized (host={config.host})")

    @property
    def host(self) -> str:
        return self._config.host

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[Duo] {message}", *args)

    # =========================================================================
    # Service Methods
    # =========================================================================

    def ping(self) -> PingResult:
        """Determine if the Duo service is up and responding."""
        response = self._json_api_call("GET", "/auth/v2/ping", {})
        return PingResult.from_dict(response)

    def check(self) -> CheckResult:
        """Determine if the integration key, secret key and signature are valid."""
        response = self._json_api_call("GET", "/auth/v2/check", {})
        return CheckResult.from_dict(response)

    def logo(self) -> Union[LogoResult, Dict[str, Any]]:
        """
        Retrieve the logo configured in the Duo admin panel.

        Returns:
            LogoResult with the raw image, or the JSON object the API
            answers with instead of an image

        Raises:
            NotFoundError: If no logo is configured
        """
        response = self._request("GET", "/auth/v2/logo", {})
        return _handle_logo_response(response)

    # =========================================================================
    # Enrollment Methods
    # =========================================================================

    def enroll(self, request: Optional[EnrollRequest] = None) -> EnrollResult:
        """
        Create a new user and an associated numberless phone.

        Args:
            request: Optional username, activation lifetime and number of
                bypass codes to generate

        Returns:
            EnrollResult with activation barcode and code
        """
        request = request or EnrollRequest()
        response = self._json_api_call("POST", "/auth/v2/enroll", request.to_params())
        return EnrollResult.from_dict(response)

    def enroll_status(self, user_id: str = "", activation_code: str = "") -> EnrollStatusResult:
        """Check whether a user has completed enrollment."""
        request = EnrollStatusRequest(user_id=user_id, activation_code=activation_code)
        response = self._request("POST", "/auth/v2/enroll_status", request.to_params())
        return EnrollStatusResult(status=_expect_payload(response, str))

    # =========================================================================
    # Authentication Methods
    # =========================================================================

    def preauth(self, request: Optional[PreAuthRequest] = None) -> PreAuthResult:
        """Determine if and with which factors a user may authenticate or enroll."""
        request = request or PreAuthRequest()
        response = self._json_api_call("POST", "/auth/v2/preauth", request.to_params())
        return PreAuthResult.from_dict(response)

    def auth(self, request: AuthRequest) -> Union[AuthResult, AuthTransaction]:
        """
        Perform second-factor authentication for a user.

        Args:
            request: Factor, user identity and factor options

        Returns:
            AuthTransaction carrying the txid if ``request.async_txn`` is set,
            otherwise the final AuthResult
        """
        self._log(f"Auth request (factor={request.factor}, async={request.async_txn})")

        response = self._request("POST", "/auth/v2/auth", request.to_params())
        return _auth_outcome(request, response)

    def auth_status(self, txid: str) -> AuthStatusResult:
        """
        Long-poll the state of an asynchronous authentication.

        The server holds the request until the transaction changes state or
        its own timeout passes, in which case ``waiting`` is still True.
        """
        request = AuthStatusRequest(txid=txid)
        response = self._json_api_call("GET", "/auth/v2/auth_status", request.to_params())
        return AuthStatusResult.from_dict(response)

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _json_api_call(self, method: HttpMethod, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        response = self._request(method, path, params)
        return _expect_payload(response)

    def _request(self, method: HttpMethod, path: str, params: Dict[str, str]) -> httpx.Response:
        """Sign and send a single request."""
        url, headers, content = _prepare_request(self._config, method, path, params)
        self._log(f"{method} {path}")

        try:
            response = self._http_client.request(
                method=method,
                url=url,
                headers=headers,
                content=content,
            )
        except httpx.TimeoutException as e:
            raise NetworkError("Request timeout", {"timeout": self._config.timeout}) from e
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        self._log(f"{method} {path} -> {response.status_code}")
        return response

    def close(self) -> None:
        """Close the HTTP client."""
        self._http_client.close()

    def __enter__(self) -> "DuoAuthClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


# =============================================================================
# Async Client
# =============================================================================

class DuoAuthAsyncClient:
    """
    Duo Auth Async Client - Asynchronous SDK entry point.

    Same operations as DuoAuthClient. Wrap ``auth_status`` in
    ``asyncio.wait_for`` to bound a long-poll.
    """

    def __init__(self, config: DuoConfig) -> None:
        """Initialize the async Duo Auth client."""
        config.validate()
        self._config = config
        self._debug = config.debug

        # HTTP client (created lazily)
        self._http_client: Optional[httpx.AsyncClient] = None

        self._log(f"DuoAuthAsyncClient initialized (host={config.host})")

    @property
    def host(self) -> str:
        return self._config.host

    def _log(self, message: str, *args: Any) -> None:
        """Log debug message."""
        if self._debug:
            logger.debug(f"[Duo] {message}", *args)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._config.timeout)
        return self._http_client

    # =========================================================================
    # Service Methods
    # =========================================================================

    async def ping(self) -> PingResult:
        """Determine if the Duo service is up and responding."""
        response = await self._json_api_call("GET", "/auth/v2/ping", {})
        return PingResult.from_dict(response)

    async def check(self) -> CheckResult:
        """Determine if the integration key, secret key and signature are valid."""
        response = await self._json_api_call("GET", "/auth/v2/check", {})
        return CheckResult.from_dict(response)

    async def logo(self) -> Union[LogoResult, Dict[str, Any]]:
        """Retrieve the configured logo (image bytes or the JSON object)."""
        response = await self._request("GET", "/auth/v2/logo", {})
        return _handle_logo_response(response)

    # =========================================================================
    # Enrollment Methods
    # =========================================================================

    async def enroll(self, request: Optional[EnrollRequest] = None) -> EnrollResult:
        """Create a new user and an associated numberless phone."""
        request = request or EnrollRequest()
        response = await self._json_api_call("POST", "/auth/v2/enroll", request.to_params())
        return EnrollResult.from_dict(response)

    async def enroll_status(self, user_id: str = "", activation_code: str = "") -> EnrollStatusResult:
        """Check whether a user has completed enrollment."""
        request = EnrollStatusRequest(user_id=user_id, activation_code=activation_code)
        response = await self._request("POST", "/auth/v2/enroll_status", request.to_params())
        return EnrollStatusResult(status=_expect_payload(response, str))

    # =========================================================================
    # Authentication Methods
    # =========================================================================

    async def preauth(self, request: Optional[PreAuthRequest] = None) -> PreAuthResult:
        """Determine if and with which factors a user may authenticate or enroll."""
        request = request or PreAuthRequest()
        response = await self._json_api_call("POST", "/auth/v2/preauth", request.to_params())
        return PreAuthResult.from_dict(response)

    async def auth(self, request: AuthRequest) -> Union[AuthResult, AuthTransaction]:
        """Perform second-factor authentication for a user."""
        self._log(f"Auth request (factor={request.factor}, async={request.async_txn})")

        response = await self._request("POST", "/auth/v2/auth", request.to_params())
        return _auth_outcome(request, response)

    async def auth_status(self, txid: str) -> AuthStatusResult:
        """Long-poll the state of an asynchronous authentication."""
        request = AuthStatusRequest(txid=txid)
        response = await self._json_api_call("GET", "/auth/v2/auth_status", request.to_params())
        return AuthStatusResult.from_dict(response)

    # =========================================================================
    # Internal Methods
    # =========================================================================

    async def _json_api_call(self, method: HttpMethod, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        response = await self._request(method, path, params)
        return _expect_payload(response)

    async def _request(self, method: HttpMethod, path: str, params: Dict[str, str]) -> httpx.Response:
        """Sign and send a single request."""
        url, headers, content = _prepare_request(self._config, method, path, params)
        self._log(f"{method} {path}")

        try:
            client = self._get_client()
            response = await client.request(
                method=method,
                url=url,
                headers=headers,
                content=content,
            )
        except httpx.TimeoutException as e:
            raise NetworkError("Request timeout", {"timeout": self._config.timeout}) from e
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        self._log(f"{method} {path} -> {response.status_code}")
        return response

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "DuoAuthAsyncClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


# =============================================================================
# Factory Functions
# =============================================================================

def create_duo_client(config: DuoConfig) -> DuoAuthClient:
    """Create a new synchronous Duo Auth client."""
    return DuoAuthClient(config)


def create_async_duo_client(config: DuoConfig) -> DuoAuthAsyncClient:
    """Create a new asynchronous Duo Auth client."""
    return DuoAuthAsyncClient(config)
