"""Shared types and exceptions for the Fordefi API client.

Error taxonomy:
- AuthenticationError: auth call returned no token (or credentials missing)
- HttpError: the service answered with a non-2xx status
- NetworkError: no response was received at all
- ValidationError: a response did not have the expected shape
- UnsupportedOperationError: the remote contract has no such operation

No layer recovers from these locally. Each is logged where it is raised and
propagated unchanged.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.fordefi.com"


@dataclass(frozen=True)
class Credentials:
    """API credentials for a Fordefi API user.

    Attributes:
        api_key: API user key, sent in the auth request body
        api_secret: Shared secret used for HMAC request signatures
    """
    api_key: str
    api_secret: str = field(repr=False)

    def __post_init__(self):
        if not self.api_key or not self.api_secret:
            raise AuthenticationError("Fordefi API key and secret are required")


@dataclass(frozen=True)
class SignedRequest:
    """Timestamp and HMAC signature for a single request."""
    timestamp: int  # milliseconds since epoch
    signature: str  # hex digest

    @property
    def headers(self) -> dict[str, str]:
        return {
            "x-signature": self.signature,
            "x-timestamp": str(self.timestamp),
        }


class FordefiError(Exception):
    """Base exception for Fordefi client errors."""
    pass


class AuthenticationError(FordefiError):
    """No access token could be obtained."""
    pass


class HttpError(FordefiError):
    """The service responded with a status outside [200, 300)."""

    def __init__(self, status: int, body: Any):
        self.status = status
        self.body = body
        super().__init__(
            f"HTTP error occurred: status = {status}\n{_describe_body(body)}"
        )


class NetworkError(FordefiError):
    """The request never received a response."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Network error occurred: {message}")


class ValidationError(FordefiError):
    """A response was missing data or had the wrong shape."""
    pass


class UnsupportedOperationError(FordefiError):
    """The requested operation is not offered by the remote service."""
    pass


def _describe_body(body: Any) -> str:
    if isinstance(body, str):
        return f"Raw response: {body}"
    try:
        return f"Error details: {json.dumps(body, separators=(',', ':'), ensure_ascii=False)}"
    except (TypeError, ValueError):
        return f"Raw response: {body!r}"


def encode_json(body: Optional[Any]) -> bytes:
    """Serialize a request body exactly once.

    The returned bytes are both signed and transmitted, so callers must not
    re-serialize the body afterwards.
    """
    if body is None:
        return b""
    return json.dumps(body, separators=(",", ":")).encode("utf-8")
