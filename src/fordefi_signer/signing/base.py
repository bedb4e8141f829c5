"""Base interfaces for transaction signing.

Signing flow:
1. Caller compiles transactions to serialized message bytes
2. Signer submits each transaction to its backend
3. Backend returns one signature per transaction (keys never leave it)
4. Caller receives signatures aligned with its input order
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import base58

from fordefi_signer.api.base import UnsupportedOperationError

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 64


class SignerType(str, Enum):
    """Type of signing backend."""
    FORDEFI = "fordefi"       # Fordefi custodial vault


@dataclass(frozen=True)
class SigningResult:
    """Signature for one transaction of a batch.

    Attributes:
        index: Position of the transaction in the submitted batch
        signature: Raw signature bytes (64 bytes for ed25519)
        public_key: Public key reported by the backend
        transaction_id: Backend identifier of the signing job
    """
    index: int
    signature: bytes
    public_key: Optional[str] = None
    transaction_id: Optional[str] = None

    @property
    def signature_b58(self) -> str:
        """Signature in the base58 form Solana uses as transaction id."""
        return base58.b58encode(self.signature).decode("ascii")


class TransactionSendingSigner(ABC):
    """Abstract signer that signs and sends batches of transactions.

    Implementations never expose private keys; they return signatures only.
    """

    def __init__(self, signer_type: SignerType, address: str):
        self.signer_type = signer_type
        self.address = address

    @abstractmethod
    async def sign_and_send_transactions(self, transactions: Sequence[bytes]) -> list[bytes]:
        """Sign and send transactions.

        Args:
            transactions: Serialized transaction message bytes

        Returns:
            One signature per transaction, in input order
        """
        pass

    async def sign_messages(self, messages: Sequence[bytes]) -> list[bytes]:
        """Sign arbitrary messages.

        Raises:
            UnsupportedOperationError: Unless the backend supports it
        """
        raise UnsupportedOperationError(
            f"{self.__class__.__name__} does not support message signing"
        )

    async def get_address(self) -> str:
        """Address this signer signs for."""
        return self.address

    async def health_check(self) -> bool:
        """Check if the signing backend is available."""
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.signer_type.value}, address={self.address})"
