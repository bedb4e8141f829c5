"""Single HTTP exchange with status and transport error classification.

Every HTTP status is delivered by httpx; this module decides what counts as
a failure so the body can be inspected first.
"""

import logging
from typing import Any, Optional

import httpx

from fordefi_signer.api.base import HttpError, NetworkError, ValidationError

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


async def send(
    http: httpx.AsyncClient,
    method: str,
    path: str,
    content: bytes = b"",
    headers: Optional[dict] = None,
    timeout: Optional[float] = None,
) -> Any:
    """Perform one request and return the parsed JSON body.

    Args:
        http: Client bound to the API base URL
        method: HTTP method
        path: Path relative to the base URL
        content: Exact body bytes to transmit
        headers: Extra request headers
        timeout: Local wait bound in seconds (client default if None)

    Returns:
        Parsed JSON, or None for an empty 2xx body

    Raises:
        NetworkError: No response was received
        HttpError: Status outside [200, 300)
        ValidationError: 2xx body is not JSON
    """
    kwargs: dict[str, Any] = {"headers": headers or {}}
    if content:
        kwargs["content"] = content
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        response = await http.request(method, path, **kwargs)
    except httpx.TransportError as e:
        message = str(e) or e.__class__.__name__
        logger.error(f"Network error on {method} {path}: {message}")
        raise NetworkError(message) from e

    return parse_response(method, path, response)


def parse_response(method: str, path: str, response: httpx.Response) -> Any:
    """Classify a delivered response."""
    status = response.status_code

    if status < 200 or status >= 300:
        try:
            body = response.json()
        except ValueError:
            body = response.text
        error = HttpError(status, body)
        logger.error(f"{method} {path} failed: {error}")
        raise error

    if not response.content:
        return None

    try:
        return response.json()
    except ValueError as e:
        logger.error(f"{method} {path} returned a non-JSON body: {response.text[:200]}")
        raise ValidationError(f"Malformed JSON response from {path}") from e
