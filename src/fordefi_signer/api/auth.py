"""Access token acquisition and caching.

The token is the only shared mutable state of the client. Callers that
arrive while no token is cached share a single in-flight auth request and
all observe its outcome (the same token or the same exception).
"""

import asyncio
import logging
import time
from typing import Callable, Optional

import httpx

from fordefi_signer.api.base import AuthenticationError, Credentials, encode_json
from fordefi_signer.api.signature import sign_request
from fordefi_signer.api.transport import JSON_HEADERS, send

logger = logging.getLogger(__name__)

AUTH_PATH = "/auth"


class AuthSession:
    """Owns the credentials and the cached access token.

    Example:
        session = AuthSession(credentials, http)
        token = await session.authenticate()
    """

    def __init__(
        self,
        credentials: Credentials,
        http: httpx.AsyncClient,
        token_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        """Initialize the session.

        Args:
            credentials: API key and secret
            http: Client bound to the API base URL
            token_ttl: Seconds a token is trusted locally (None = until invalidated)
            clock: Monotonic clock used for the TTL
            clock_ms: Epoch-millisecond clock used for request signatures
        """
        self._credentials = credentials
        self._http = http
        self._token_ttl = token_ttl
        self._clock = clock
        self._clock_ms = clock_ms
        self._token: Optional[str] = None
        self._acquired_at: Optional[float] = None
        self._inflight: Optional[asyncio.Future] = None

    @property
    def token(self) -> Optional[str]:
        """Currently cached token, if still valid."""
        if self._token is None:
            return None
        if self._token_ttl is not None and self._acquired_at is not None:
            if self._clock() - self._acquired_at >= self._token_ttl:
                logger.debug("Cached Fordefi access token expired")
                return None
        return self._token

    @property
    def has_token(self) -> bool:
        return self.token is not None

    async def authenticate(self) -> str:
        """Return the cached token, acquiring one if needed.

        Raises:
            AuthenticationError: Response carried no token
            HttpError: Auth endpoint returned a non-2xx status
            NetworkError: Auth endpoint unreachable
        """
        token = self.token
        if token is not None:
            return token

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._acquire())
            self._inflight.add_done_callback(self._clear_inflight)

        # shield: a cancelled waiter must not cancel the shared attempt
        return await asyncio.shield(self._inflight)

    def invalidate(self, stale_token: Optional[str] = None) -> None:
        """Drop the cached token.

        Args:
            stale_token: Only drop the cache if it still holds this token
        """
        if stale_token is not None and stale_token != self._token:
            return
        self._token = None
        self._acquired_at = None

    def _clear_inflight(self, future: asyncio.Future) -> None:
        if self._inflight is future:
            self._inflight = None
        if not future.cancelled():
            future.exception()

    async def _acquire(self) -> str:
        body = encode_json({"apiKey": self._credentials.api_key})
        signed = sign_request(self._credentials.api_secret, body, self._clock_ms)

        logger.debug("Requesting Fordefi access token")
        try:
            data = await send(
                self._http,
                "POST",
                AUTH_PATH,
                content=body,
                headers={**JSON_HEADERS, **signed.headers},
            )
        except Exception as e:
            logger.error(f"Authentication failed: {e}")
            raise

        token = data.get("accessToken") if isinstance(data, dict) else None
        if not token:
            logger.error("Authentication failed: no access token in response")
            raise AuthenticationError("No access token received from Fordefi")

        self._token = token
        self._acquired_at = self._clock()
        logger.info("Authenticated with Fordefi")
        return token
