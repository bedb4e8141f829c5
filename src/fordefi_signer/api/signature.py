"""HMAC request signatures for the Fordefi API.

The signed message is the decimal millisecond timestamp immediately followed
by the request body bytes. The same bytes must be sent on the wire.
"""

import hashlib
import hmac
import time
from typing import Callable, Optional, Union

from fordefi_signer.api.base import SignedRequest


def now_ms() -> int:
    """Current time in milliseconds since epoch."""
    return int(time.time() * 1000)


def sign(secret: str, timestamp_ms: int, body: Union[bytes, str]) -> str:
    """Compute the hex HMAC-SHA256 of ``timestamp_ms || body``.

    Args:
        secret: API secret
        timestamp_ms: Request timestamp in milliseconds
        body: Serialized request body (str is UTF-8 encoded)

    Returns:
        Lowercase hex digest
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    message = str(timestamp_ms).encode("ascii") + body
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def sign_request(
    secret: str,
    body: Union[bytes, str],
    clock_ms: Optional[Callable[[], int]] = None,
) -> SignedRequest:
    """Stamp and sign a request body."""
    timestamp = (clock_ms or now_ms)()
    return SignedRequest(timestamp=timestamp, signature=sign(secret, timestamp, body))
