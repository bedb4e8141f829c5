"""Fordefi API client.

- signature: HMAC request signatures
- auth: access token session
- client: authenticated GET/POST with error classification
- transactions: create-and-wait, sign, status and wallet calls
"""

from fordefi_signer.api.auth import AuthSession
from fordefi_signer.api.base import (
    AuthenticationError,
    Credentials,
    FordefiError,
    HttpError,
    NetworkError,
    SignedRequest,
    UnsupportedOperationError,
    ValidationError,
)
from fordefi_signer.api.client import ApiClient
from fordefi_signer.api.transactions import TransactionOptions, TransactionSubmitter

__all__ = [
    "ApiClient",
    "AuthSession",
    "AuthenticationError",
    "Credentials",
    "FordefiError",
    "HttpError",
    "NetworkError",
    "SignedRequest",
    "TransactionOptions",
    "TransactionSubmitter",
    "UnsupportedOperationError",
    "ValidationError",
]
