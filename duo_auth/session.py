"""
Asynchronous Authentication Lifecycle

An ``auth`` call with ``async_txn=True`` returns a txid instead of a
verdict. These helpers turn that txid into a final outcome by polling
``auth_status``:

    REQUESTED -> PENDING -> ALLOWED | DENIED | FAILED

``REQUESTED`` only exists before ``auth`` returns. ``ALLOWED`` and
``DENIED`` are terminal; the txid is consumed and must not be polled
again. ``FAILED`` describes one failed call: polling the same txid again
is safe because ``auth_status`` has no side effects on the transaction.

Nothing here keeps state between calls. The iterator is the session;
stop iterating to cancel. No timeout is imposed on the long-poll.

Example:
    snapshot = start_auth(client, AuthRequest(factor="push", username="alice",
                                              device="auto", async_txn=True))
    for snapshot in iter_auth_status(client, snapshot.txid):
        show_progress(snapshot.status_msg)
    if snapshot.state is AuthState.ALLOWED:
        ...
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Iterator, Optional, Union

from .client import DuoAuthAsyncClient, DuoAuthClient
from .errors import DuoError
from .types import AuthRequest, AuthResult, AuthStatusResult, AuthTransaction


logger = logging.getLogger("duo_auth")


class AuthState(str, Enum):
    """Where an authentication attempt stands."""
    REQUESTED = "requested"
    PENDING = "pending"
    ALLOWED = "allowed"
    DENIED = "denied"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True once the transaction itself has been resolved."""
        return self in (AuthState.ALLOWED, AuthState.DENIED)


@dataclass(frozen=True)
class AuthSnapshot:
    """State of an authentication as observed after one API call."""

    state: AuthState
    txid: Optional[str] = None
    status: str = ""
    status_msg: str = ""
    trusted_device_token: Optional[str] = None
    error: Optional[DuoError] = None

    @property
    def allowed(self) -> bool:
        return self.state is AuthState.ALLOWED


def snapshot_from_auth(outcome: Union[AuthResult, AuthTransaction]) -> AuthSnapshot:
    """Map an ``auth`` answer to PENDING (async) or a direct verdict (sync)."""
    if isinstance(outcome, AuthTransaction):
        return AuthSnapshot(AuthState.PENDING, txid=outcome.txid)

    return AuthSnapshot(
        AuthState.ALLOWED if outcome.allowed else AuthState.DENIED,
        status=outcome.status,
        status_msg=outcome.status_msg,
        trusted_device_token=outcome.trusted_device_token if outcome.allowed else None,
    )


def snapshot_from_status(txid: str, result: AuthStatusResult) -> AuthSnapshot:
    """Map one ``auth_status`` answer onto the lifecycle."""
    if result.waiting:
        state = AuthState.PENDING
    elif result.success:
        state = AuthState.ALLOWED
    else:
        state = AuthState.DENIED

    return AuthSnapshot(
        state,
        txid=txid,
        status=result.status,
        status_msg=result.status_msg,
        trusted_device_token=result.trusted_device_token if state is AuthState.ALLOWED else None,
    )


def _failed(txid: Optional[str], error: DuoError) -> AuthSnapshot:
    logger.debug("[Duo] auth %s failed: %r", txid or "request", error)
    return AuthSnapshot(AuthState.FAILED, txid=txid, status=str(error.code), error=error)


# =============================================================================
# Blocking helpers
# =============================================================================

def start_auth(client: DuoAuthClient, request: AuthRequest) -> AuthSnapshot:
    """
    Issue ``auth`` and report the resulting state.

    Returns:
        PENDING with a txid for asynchronous requests, ALLOWED/DENIED for
        synchronous ones, FAILED (no txid) if the call itself failed
    """
    try:
        outcome = client.auth(request)
    except DuoError as e:
        return _failed(None, e)
    snapshot = snapshot_from_auth(outcome)
    logger.debug("[Duo] auth requested -> %s", snapshot.state.value)
    return snapshot


def iter_auth_status(client: DuoAuthClient, txid: str) -> Iterator[AuthSnapshot]:
    """
    Poll ``auth_status`` and yield one snapshot per answer.

    Stops after the first snapshot that is not PENDING. A FAILED snapshot
    carries the error; iterate again with the same txid to keep polling.
    """
    while True:
        try:
            result = client.auth_status(txid)
        except DuoError as e:
            yield _failed(txid, e)
            return

        snapshot = snapshot_from_status(txid, result)
        logger.debug("[Duo] auth %s -> %s (%s)", txid, snapshot.state.value, snapshot.status)
        yield snapshot
        if snapshot.state is not AuthState.PENDING:
            return


def resolve_auth(
    client: DuoAuthClient, txid: str, max_polls: Optional[int] = None
) -> AuthSnapshot:
    """
    Poll until the transaction resolves, fails, or ``max_polls`` is used up.

    Returns:
        The last snapshot observed (PENDING if ``max_polls`` ran out)
    """
    snapshot = AuthSnapshot(AuthState.PENDING, txid=txid)
    if max_polls is not None and max_polls <= 0:
        return snapshot
    for polls, snapshot in enumerate(iter_auth_status(client, txid), start=1):
        if max_polls is not None and polls >= max_polls:
            break
    return snapshot


# =============================================================================
# Asyncio helpers
# =============================================================================

async def astart_auth(client: DuoAuthAsyncClient, request: AuthRequest) -> AuthSnapshot:
    """Async counterpart of ``start_auth``."""
    try:
        outcome = await client.auth(request)
    except DuoError as e:
        return _failed(None, e)
    snapshot = snapshot_from_auth(outcome)
    logger.debug("[Duo] auth requested -> %s", snapshot.state.value)
    return snapshot


async def aiter_auth_status(client: DuoAuthAsyncClient, txid: str) -> AsyncIterator[AuthSnapshot]:
    """Async counterpart of ``iter_auth_status``."""
    while True:
        try:
            result = await client.auth_status(txid)
        except DuoError as e:
            yield _failed(txid, e)
            return

        snapshot = snapshot_from_status(txid, result)
        logger.debug("[Duo] auth %s -> %s (%s)", txid, snapshot.state.value, snapshot.status)
        yield snapshot
        if snapshot.state is not AuthState.PENDING:
            return


async def aresolve_auth(
    client: DuoAuthAsyncClient, txid: str, max_polls: Optional[int] = None
) -> AuthSnapshot:
    """Async counterpart of ``resolve_auth``."""
    snapshot = AuthSnapshot(AuthState.PENDING, txid=txid)
    if max_polls is not None and max_polls <= 0:
        return snapshot
    polls = 0
    async for snapshot in aiter_auth_status(client, txid):
        polls += 1
        if max_polls is not None and polls >= max_polls:
            break
    return snapshot
