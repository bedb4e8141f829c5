"""fordefi-signer: delegate Solana transaction signing to a Fordefi vault.

Usage:
    from fordefi_signer import create_fordefi_signer

    signer = create_fordefi_signer(address, vault_id, "solana_mainnet")
    signatures = await signer.sign_and_send_transactions([message_bytes])
"""

from fordefi_signer.api import (
    ApiClient,
    AuthSession,
    AuthenticationError,
    Credentials,
    FordefiError,
    HttpError,
    NetworkError,
    TransactionOptions,
    TransactionSubmitter,
    UnsupportedOperationError,
    ValidationError,
)
from fordefi_signer.contracts import Mode, TransactionJob, TransactionState, TransactionType
from fordefi_signer.signing import FordefiSigner, SigningResult, create_fordefi_signer

__version__ = "0.1.0"
__all__ = [
    "ApiClient",
    "AuthSession",
    "AuthenticationError",
    "Credentials",
    "FordefiError",
    "FordefiSigner",
    "HttpError",
    "Mode",
    "NetworkError",
    "SigningResult",
    "TransactionJob",
    "TransactionOptions",
    "TransactionState",
    "TransactionSubmitter",
    "TransactionType",
    "UnsupportedOperationError",
    "ValidationError",
    "create_fordefi_signer",
]
