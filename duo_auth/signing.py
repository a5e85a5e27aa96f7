"""
Request Signing for the Duo Auth API

Every Auth API request carries an HTTP Basic ``Authorization`` header whose
password is an HMAC over a canonical form of the request:

    date\\nMETHOD\\nhost\\npath\\nkey1=value1&key2=value2

Parameters are sorted by name and percent-encoded with only ``A-Za-z0-9``
and ``-_.~`` left as-is. The exact same encoded string must be sent on the
wire (query string for GET, form body for POST), otherwise the server
computes a different signature.

Example:
    from duo_auth.signing import signed_headers

    headers = signed_headers("GET", "api-xxxxxxxx.duosecurity.com",
                             "/auth/v2/check", {}, ikey, skey)
"""

import base64
import email.utils
import hashlib
import hmac
from typing import Dict, Optional
from urllib.parse import quote


DIGESTS = {
    "sha1": hashlib.sha1,
    "sha512": hashlib.sha512,
}


def canonicalize_params(params: Dict[str, str]) -> str:
    """
    Encode parameters in Duo's canonical order and escaping.

    Args:
        params: Parameter mapping; values must already be strings

    Returns:
        ``key=value`` pairs joined with ``&``, sorted by key
    """
    return "&".join(
        f"{quote(key, safe='~')}={quote(params[key], safe='~')}"
        for key in sorted(params)
    )


def canonicalize(method: str, host: str, path: str, params: Dict[str, str], date: str) -> str:
    """Build the newline-joined string that gets signed."""
    return "\n".join([
        date,
        method.upper(),
        host.lower(),
        path,
        canonicalize_params(params),
    ])


def sign(
    method: str,
    host: str,
    path: str,
    params: Dict[str, str],
    ikey: str,
    skey: str,
    date: str,
    digestmod: str = "sha1",
) -> str:
    """
    Compute the ``Authorization`` header value for a request.

    Returns:
        ``Basic base64(ikey:hex-hmac)``
    """
    canonical = canonicalize(method, host, path, params, date)
    signature = hmac.new(
        skey.encode("utf-8"),
        canonical.encode("utf-8"),
        DIGESTS[digestmod],
    ).hexdigest()
    credentials = f"{ikey}:{signature}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


def signed_headers(
    method: str,
    host: str,
    path: str,
    params: Dict[str, str],
    ikey: str,
    skey: str,
    digestmod: str = "sha1",
    date: Optional[str] = None,
) -> Dict[str, str]:
    """
    Produce the ``Date`` and ``Authorization`` headers for a request.

    Args:
        date: RFC 2822 date to sign (defaults to now); must match the
            ``Date`` header sent with the request
    """
    if date is None:
        date = email.utils.formatdate()
    return {
        "Date": date,
        "Authorization": sign(method, host, path, params, ikey, skey, date, digestmod),
    }
