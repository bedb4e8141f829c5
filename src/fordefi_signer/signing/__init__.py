"""Transaction signing services.

- FordefiSigner: batches signed by a Fordefi custodial vault
"""

from fordefi_signer.signing.base import (
    SignerType,
    SigningResult,
    TransactionSendingSigner,
)
from fordefi_signer.signing.factory import create_fordefi_signer, get_signer_info
from fordefi_signer.signing.fordefi import FordefiSigner, extract_signature

__all__ = [
    "FordefiSigner",
    "SignerType",
    "SigningResult",
    "TransactionSendingSigner",
    "create_fordefi_signer",
    "extract_signature",
    "get_signer_info",
]
