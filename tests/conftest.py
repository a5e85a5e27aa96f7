"""
Shared fixtures for the Duo Auth SDK tests.
"""

from typing import Any, Dict

import pytest

from duo_auth import DuoAuthClient, DuoAuthAsyncClient, DuoConfig


TEST_HOST = "api-test1234.duosecurity.com"
TEST_IKEY = "DIWJ8X6AEYOR5OMC6TQ1"
TEST_SKEY = "Zh5eGmUq9zpfQnyUIu5OL9iWoMMv5ZNmk3zLJ4Ep"


def ok(response: Any) -> Dict[str, Any]:
    """Wrap a payload in the API's success envelope."""
    return {"stat": "OK", "response": response}


def fail(code: int, message: str, message_detail: str = "") -> Dict[str, Any]:
    """Build the API's failure envelope."""
    body: Dict[str, Any] = {"stat": "FAIL", "code": code, "message": message}
    if message_detail:
        body["message_detail"] = message_detail
    return body


@pytest.fixture
def valid_config() -> DuoConfig:
    """Valid configuration for testing."""
    return DuoConfig(
        ikey=TEST_IKEY,
        skey=TEST_SKEY,
        host=TEST_HOST,
        debug=True,
    )


@pytest.fixture
def sync_client(valid_config: DuoConfig) -> DuoAuthClient:
    """Create sync client for testing."""
    return DuoAuthClient(valid_config)


@pytest.fixture
def async_client(valid_config: DuoConfig) -> DuoAuthAsyncClient:
    """Create async client for testing."""
    return DuoAuthAsyncClient(valid_config)
