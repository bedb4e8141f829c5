"""Pytest configuration and fixtures."""

import json
import os
from typing import Any, Callable, Optional, Union

import httpx
import pytest
import pytest_asyncio

# Set test environment
os.environ["FORDEFI_API_KEY"] = "test-api-key"
os.environ["FORDEFI_API_SECRET"] = "test-api-secret"
os.environ["FORDEFI_BASE_URL"] = "https://fordefi.test"

from fordefi_signer.api.base import Credentials
from fordefi_signer.api.client import ApiClient
from fordefi_signer.api.transactions import TransactionSubmitter

BASE_URL = "https://fordefi.test"
API_KEY = "test-api-key"
API_SECRET = "test-api-secret"

Handler = Callable[[httpx.Request], Any]


def job_payload(
    job_id: str = "tx-1",
    state: str = "completed",
    signatures: Optional[list] = None,
    **extra,
) -> dict:
    """Build a create-and-wait response body."""
    body = {
        "id": job_id,
        "creation_time": "2025-01-01T00:00:00Z",
        "modification_time": "2025-01-01T00:00:05Z",
        "state": state,
        "vault_id": "vault-1",
        "type": "solana_transaction",
        "chain": {"unique_id": "solana_mainnet", "name": "Solana"},
    }
    if signatures is not None:
        body["signatures"] = signatures
    body.update(extra)
    return body


class FakeFordefi:
    """In-process stand-in for the Fordefi API, served via httpx.MockTransport.

    Routes map (method, path) to a handler or a static response. Every
    request is recorded.
    """

    def __init__(self, token: str = "test-token"):
        self.token = token
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Handler] = {}
        self.route("POST", "/auth", lambda request: httpx.Response(200, json={"accessToken": self.token}))

    def route(self, method: str, path: str, handler: Union[Handler, httpx.Response, dict]):
        if isinstance(handler, dict):
            payload = handler
            handler = lambda request: httpx.Response(200, json=payload)  # noqa: E731
        elif isinstance(handler, httpx.Response):
            response = handler
            handler = lambda request: response  # noqa: E731
        self.routes[(method, path)] = handler

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @property
    def auth_calls(self) -> int:
        return len(self.calls("POST", "/auth"))

    def handle(self, request: httpx.Request):
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "not found"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(API_KEY, API_SECRET)


@pytest.fixture
def fake_fordefi() -> FakeFordefi:
    return FakeFordefi()


@pytest_asyncio.fixture
async def api_client(credentials, fake_fordefi):
    """ApiClient wired to the fake Fordefi API."""
    client = ApiClient(
        credentials,
        base_url=BASE_URL,
        transport=fake_fordefi.transport,
        clock_ms=lambda: 1700000000000,
    )
    yield client
    await client.aclose()


@pytest.fixture
def submitter(api_client) -> TransactionSubmitter:
    return TransactionSubmitter(api_client, create_and_wait_timeout=60.0, wait_timeout_margin=5.0)
