"""
Duo Auth SDK Type Definitions

Configuration, per-operation request builders and per-operation result
types for the Auth API v2.

Request builders declare their wire fields as an explicit table. A field
is transmitted unless its omit predicate says the value is the default,
so a legitimately empty or zero value can be sent where the API defines
one as meaningful.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Literal, Optional, Tuple

from .errors import ConfigurationError


SUPPORTED_DIGESTS = ("sha1", "sha512")

DEFAULT_USER_AGENT = "duo-auth-client/0.1.0"


@dataclass
class DuoConfig:
    """Client configuration for one Duo Auth API application."""

    # Integration key (DI...)
    ikey: str
    # Secret key, used only to sign requests
    skey: str
    # Per-account API host, e.g. api-xxxxxxxx.duosecurity.com
    host: str
    # Request timeout in seconds (default: None, auth_status long-polls)
    timeout: Optional[float] = None
    # HMAC digest used for request signatures
    digestmod: str = "sha1"
    user_agent: str = DEFAULT_USER_AGENT
    # Extra headers sent with every request (cannot replace signed headers)
    headers: Optional[Dict[str, str]] = None
    # Enable debug logging (default: False)
    debug: bool = False

    def validate(self) -> None:
        """Raise ConfigurationError if the config cannot sign requests."""
        for name in ("ikey", "skey", "host"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} is required")
        if "://" in self.host or "/" in self.host:
            raise ConfigurationError(
                "host must be a bare hostname, e.g. api-xxxxxxxx.duosecurity.com",
                {"host": self.host},
            )
        if self.digestmod not in SUPPORTED_DIGESTS:
            raise ConfigurationError(
                f"Unsupported digestmod {self.digestmod!r}",
                {"supported": list(SUPPORTED_DIGESTS)},
            )

    @classmethod
    def from_env(cls, prefix: str = "DUO_", **overrides: Any) -> "DuoConfig":
        """Build a config from ``{prefix}IKEY``, ``SKEY``, ``HOST`` and ``TIMEOUT``."""
        timeout = os.environ.get(f"{prefix}TIMEOUT")
        values: Dict[str, Any] = {
            "ikey": os.environ.get(f"{prefix}IKEY", ""),
            "skey": os.environ.get(f"{prefix}SKEY", ""),
            "host": os.environ.get(f"{prefix}HOST", ""),
            "timeout": float(timeout) if timeout else None,
        }
        values.update(overrides)
        config = cls(**values)
        config.validate()
        return config


# =============================================================================
# Request builders
# =============================================================================

def _is_empty(value: str) -> bool:
    return value == ""


def _is_zero(value: int) -> bool:
    return value == 0


def _encode_flag(value: bool) -> str:
    return "1" if value else "0"


@dataclass(frozen=True)
class ParamField:
    """One wire parameter: source attribute, transmitted name and rules."""

    attr: str
    name: str
    # None means the field is always transmitted
    omit: Optional[Callable[[Any], bool]] = _is_empty
    encode: Callable[[Any], str] = str


class RequestParams:
    """Base for request builders; subclasses list their ``FIELDS``."""

    FIELDS: ClassVar[Tuple[ParamField, ...]] = ()

    def to_params(self) -> Dict[str, str]:
        """Build the parameter mapping that is signed and transmitted."""
        params: Dict[str, str] = {}
        for spec in self.FIELDS:
            value = getattr(self, spec.attr)
            if spec.omit is not None and spec.omit(value):
                continue
            params[spec.name] = spec.encode(value)
        return params


@dataclass
class EnrollRequest(RequestParams):
    """Parameters for ``/auth/v2/enroll``; everything is optional."""

    username: str = ""
    valid_secs: int = 0
    bypass_codes: int = 0

    FIELDS: ClassVar[Tuple[ParamField, ...]] = (
        ParamField("username", "username"),
        ParamField("valid_secs", "valid_secs", _is_zero),
        ParamField("bypass_codes", "bypass_codes", _is_zero),
    )


@dataclass
class EnrollStatusRequest(RequestParams):
    """Parameters for ``/auth/v2/enroll_status``. Both are always sent."""

    user_id: str = ""
    activation_code: str = ""

    FIELDS: ClassVar[Tuple[ParamField, ...]] = (
        ParamField("user_id", "user_id", None),
        ParamField("activation_code", "activation_code", None),
    )


@dataclass
class PreAuthRequest(RequestParams):
    """Parameters for ``/auth/v2/preauth``."""

    username: str = ""
    user_id: str = ""
    ipaddr: str = ""
    trusted_device_token: str = ""

    FIELDS: ClassVar[Tuple[ParamField, ...]] = (
        ParamField("username", "username"),
        ParamField("user_id", "user_id"),
        ParamField("ipaddr", "ipaddr"),
        ParamField("trusted_device_token", "trusted_device_token"),
    )


@dataclass
class AuthRequest(RequestParams):
    """
    Parameters for ``/auth/v2/auth``.

    ``factor`` is one of Duo's factor names (auto, push, phone, sms,
    passcode) and is not validated locally. ``async_txn`` maps to the
    wire field ``async``, which is always sent as "0" or "1".
    """

    factor: str
    username: str = ""
    user_id: str = ""
    ipaddr: str = ""
    async_txn: bool = False
    type: str = ""
    display_username: str = ""
    pushinfo: str = ""
    device: str = ""
    passcode: str = ""

    FIELDS: ClassVar[Tuple[ParamField, ...]] = (
        ParamField("factor", "factor", None),
        ParamField("async_txn", "async", None, _encode_flag),
        ParamField("username", "username"),
        ParamField("user_id", "user_id"),
        ParamField("ipaddr", "ipaddr"),
        ParamField("type", "type"),
        ParamField("display_username", "display_username"),
        ParamField("pushinfo", "pushinfo"),
        ParamField("device", "device"),
        ParamField("passcode", "passcode"),
    )


@dataclass
class AuthStatusRequest(RequestParams):
    """Parameters for ``/auth/v2/auth_status``."""

    txid: str

    FIELDS: ClassVar[Tuple[ParamField, ...]] = (
        ParamField("txid", "txid", None),
    )


# =============================================================================
# Results
# =============================================================================

@dataclass
class PingResult:
    """Service liveness; ``time`` is the server's UNIX timestamp."""
    time: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PingResult":
        return cls(time=int(data.get("time", 0)))


@dataclass
class CheckResult:
    """Credentials and signature were accepted."""
    time: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckResult":
        return cls(time=int(data.get("time", 0)))


@dataclass
class LogoResult:
    """Raw logo image as served by the API."""
    content: bytes
    content_type: str


@dataclass
class EnrollResult:
    """Activation data for a newly created user."""

    activation_barcode: str
    activation_code: str
    user_id: str
    username: str
    valid_secs: int = 0
    expiration: Optional[int] = None
    bypass_codes: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnrollResult":
        return cls(
            activation_barcode=data.get("activation_barcode", ""),
            activation_code=data.get("activation_code", ""),
            user_id=data.get("user_id", ""),
            username=data.get("username", ""),
            valid_secs=data.get("valid_secs", 0),
            expiration=data.get("expiration"),
            bypass_codes=data.get("bypass_codes", []),
        )


EnrollStatus = Literal["success", "waiting", "invalid"]


@dataclass
class EnrollStatusResult:
    """Whether an activation code has been claimed."""

    status: EnrollStatus

    @property
    def is_enrolled(self) -> bool:
        return self.status == "success"

    @property
    def is_waiting(self) -> bool:
        return self.status == "waiting"

    @property
    def is_invalid(self) -> bool:
        return self.status == "invalid"


@dataclass
class Device:
    """An authentication device returned by preauth."""

    device: str
    type: str
    capabilities: List[str] = field(default_factory=list)
    name: str = ""
    number: str = ""
    display_name: str = ""
    sms_nextcode: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        return cls(
            device=data.get("device", ""),
            type=data.get("type", ""),
            capabilities=data.get("capabilities", []),
            name=data.get("name", ""),
            number=data.get("number", ""),
            display_name=data.get("display_name", ""),
            sms_nextcode=data.get("sms_nextcode"),
        )


PreAuthOutcome = Literal["auth", "allow", "deny", "enroll"]


@dataclass
class PreAuthResult:
    """Which factors, if any, the user may authenticate with."""

    result: PreAuthOutcome
    status_msg: str
    devices: List[Device] = field(default_factory=list)
    enroll_portal_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PreAuthResult":
        return cls(
            result=data.get("result", ""),
            status_msg=data.get("status_msg", ""),
            devices=[Device.from_dict(d) for d in data.get("devices", [])],
            enroll_portal_url=data.get("enroll_portal_url"),
        )


@dataclass
class AuthResult:
    """Final outcome of a synchronous ``auth`` call."""

    result: str
    status: str
    status_msg: str
    trusted_device_token: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.result == "allow"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthResult":
        result = data.get("result", "")
        return cls(
            result=result,
            status=data.get("status", ""),
            status_msg=data.get("status_msg", ""),
            trusted_device_token=(
                (data.get("trusted_device_token") or None) if result == "allow" else None
            ),
        )


@dataclass
class AuthTransaction:
    """Handle for an asynchronous ``auth`` call; poll it with ``auth_status``."""

    txid: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthTransaction":
        return cls(txid=data["txid"])


@dataclass
class AuthStatusResult:
    """One ``auth_status`` long-poll answer."""

    waiting: bool
    success: bool
    status: str
    status_msg: str
    result: Optional[str] = None
    trusted_device_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthStatusResult":
        result = data.get("result")
        # The API reports the outcome as result: waiting | allow | deny
        waiting = bool(data["waiting"]) if "waiting" in data else result == "waiting"
        success = bool(data["success"]) if "success" in data else result == "allow"
        return cls(
            waiting=waiting,
            success=success,
            status=data.get("status", ""),
            status_msg=data.get("status_msg", ""),
            result=result,
            # Only a successful, resolved transaction may hand out a token
            trusted_device_token=(
                (data.get("trusted_device_token") or None) if success and not waiting else None
            ),
        )
