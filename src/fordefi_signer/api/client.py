"""Authenticated HTTP client for the Fordefi API.

POST requests carry the bearer token plus an HMAC signature computed over the
exact body bytes that are transmitted. GET requests carry only the token.

There is no generic retry policy here. The one exception is a 401 on an
authenticated call: the cached token is dropped, a new one is acquired and
the request is replayed once.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from fordefi_signer.api.auth import AuthSession
from fordefi_signer.api.base import DEFAULT_BASE_URL, Credentials, HttpError, encode_json
from fordefi_signer.api.signature import sign_request
from fordefi_signer.api.transport import JSON_HEADERS, send

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST")


class ApiClient:
    """Fordefi API client.

    Usage:
        async with ApiClient(Credentials(key, secret)) as api:
            data = await api.request("GET", "/v1/wallets/solana")
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        token_ttl: Optional[float] = None,
        reauthenticate_on_401: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        """Initialize the client.

        Args:
            credentials: API key and secret
            base_url: API base URL
            timeout: Default local wait bound in seconds
            token_ttl: Seconds an access token is trusted locally
            reauthenticate_on_401: Replay once with a fresh token after a 401
            transport: Optional httpx transport (tests, proxies)
            clock_ms: Epoch-millisecond clock used for request signatures
        """
        self.base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._reauthenticate_on_401 = reauthenticate_on_401
        self._clock_ms = clock_ms
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=JSON_HEADERS,
            transport=transport,
        )
        self.auth = AuthSession(
            credentials,
            self._http,
            token_ttl=token_ttl,
            clock_ms=clock_ms,
        )

    @classmethod
    def from_settings(cls, settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ApiClient":
        """Build a client from ``config.Settings``."""
        return cls(
            Credentials(settings.fordefi_api_key, settings.fordefi_api_secret),
            base_url=settings.fordefi_base_url,
            timeout=settings.request_timeout,
            token_ttl=settings.token_ttl,
            reauthenticate_on_401=settings.reauthenticate_on_401,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Perform an authenticated request.

        Args:
            method: "GET" or "POST"
            path: Path relative to the base URL
            body: JSON-serializable body (POST only)
            timeout: Local wait bound in seconds for this call

        Returns:
            Parsed JSON response

        Raises:
            HttpError: Non-2xx status
            NetworkError: No response received
            AuthenticationError: No token could be obtained
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        token = await self.auth.authenticate()
        try:
            return await self._send(method, path, body, token, timeout)
        except HttpError as e:
            if e.status != 401 or not self._reauthenticate_on_401:
                raise
            logger.warning(f"{method} {path} rejected with 401, re-authenticating once")

        self.auth.invalidate(token)
        token = await self.auth.authenticate()
        return await self._send(method, path, body, token, timeout)

    async def get(self, path: str, timeout: Optional[float] = None) -> Any:
        return await self.request("GET", path, timeout=timeout)

    async def post(self, path: str, body: Optional[Any] = None, timeout: Optional[float] = None) -> Any:
        return await self.request("POST", path, body, timeout=timeout)

    async def _send(
        self,
        method: str,
        path: str,
        body: Optional[Any],
        token: str,
        timeout: Optional[float],
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"}
        content = b""

        if method == "POST":
            content = encode_json(body)
            signed = sign_request(self._credentials.api_secret, content, self._clock_ms)
            headers.update(signed.headers)

        logger.debug(f"{method} {path}")
        return await send(self._http, method, path, content=content, headers=headers, timeout=timeout)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url})"
