"""
Duo Auth Python SDK - Basic Usage Example

Reads DUO_IKEY, DUO_SKEY and DUO_HOST from the environment and walks a
user through preauth and a push authentication.

    python examples/basic_usage.py alice
"""

import asyncio
import logging
import sys

from duo_auth import (
    AuthRequest,
    AuthState,
    DuoAuthAsyncClient,
    DuoAuthClient,
    DuoConfig,
    DuoError,
    PreAuthRequest,
    aiter_auth_status,
    astart_auth,
    iter_auth_status,
    start_auth,
)


def sync_example(username: str) -> None:
    """Synchronous client example."""
    print("=== Sync Client Example ===\n")

    with DuoAuthClient(DuoConfig.from_env(debug=True)) as client:
        try:
            print(f"Duo server time: {client.check().time}")
            preauth = client.preauth(PreAuthRequest(username=username))
        except DuoError as e:
            print(f"Error: {e.code} {e}")
            return

        print(f"Preauth: {preauth.result} ({preauth.status_msg})")
        if preauth.result != "auth":
            return

        snapshot = start_auth(client, AuthRequest(
            factor="push",
            username=username,
            device="auto",
            async_txn=True,
        ))
        if snapshot.state is AuthState.PENDING:
            for snapshot in iter_auth_status(client, snapshot.txid):
                print(f"  {snapshot.state.value}: {snapshot.status_msg}")

        print(f"Result: {snapshot.state.value}")
        if snapshot.trusted_device_token:
            print("Trusted device token issued; pass it to preauth next time.")


async def async_example(username: str) -> None:
    """Asynchronous client example, bounding each long-poll."""
    print("\n=== Async Client Example ===\n")

    async with DuoAuthAsyncClient(DuoConfig.from_env()) as client:
        snapshot = await astart_auth(client, AuthRequest(
            factor="push",
            username=username,
            device="auto",
            async_txn=True,
        ))
        if snapshot.state is not AuthState.PENDING:
            print(f"Result: {snapshot.state.value}")
            return

        polls = aiter_auth_status(client, snapshot.txid)
        while True:
            try:
                snapshot = await asyncio.wait_for(polls.__anext__(), timeout=120)
            except StopAsyncIteration:
                break
            except asyncio.TimeoutError:
                print("Gave up waiting for the user")
                break
            print(f"  {snapshot.state.value}: {snapshot.status_msg}")

        print(f"Result: {snapshot.state.value}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    user = sys.argv[1] if len(sys.argv) > 1 else "alice"
    sync_example(user)
    asyncio.run(async_example(user))
