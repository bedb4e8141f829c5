"""Fordefi signing backend.

Signs a batch by creating one Fordefi transaction per member and waiting
server-side for each to finish. Members are submitted concurrently and are
independent jobs at Fordefi:

- each member gets its own idempotence id (``{base}-{index}``), so a single
  member can be re-submitted safely;
- the batch is not atomic. If one member fails validation the call fails,
  but siblings that already completed remotely are neither cancelled nor
  compensated.
"""

import asyncio
import base64
import binascii
import logging
from typing import Optional, Sequence

from fordefi_signer.api.base import FordefiError, ValidationError
from fordefi_signer.api.transactions import TransactionOptions, TransactionSubmitter
from fordefi_signer.contracts.transactions import TransactionJob
from fordefi_signer.signing.base import (
    SIGNATURE_LENGTH,
    SignerType,
    SigningResult,
    TransactionSendingSigner,
)

logger = logging.getLogger(__name__)


class FordefiSigner(TransactionSendingSigner):
    """Transaction-sending signer backed by a Fordefi vault.

    Example:
        signer = FordefiSigner(address, vault_id, "solana_mainnet", submitter)
        signatures = await signer.sign_and_send_transactions([msg1, msg2])
    """

    def __init__(
        self,
        address: str,
        vault_id: str,
        chain: str,
        submitter: TransactionSubmitter,
        options: Optional[TransactionOptions] = None,
    ):
        """Initialize Fordefi signer.

        Args:
            address: Vault address the transactions are signed for
            vault_id: Fordefi vault ID
            chain: Chain identifier (e.g. "solana_mainnet")
            submitter: Transaction submitter bound to an API client
            options: Options applied to every submission
        """
        super().__init__(SignerType.FORDEFI, address)
        self.vault_id = vault_id
        self.chain = chain
        self.submitter = submitter
        self.options = options or TransactionOptions()

    async def sign_and_send_transactions(self, transactions: Sequence[bytes]) -> list[bytes]:
        results = await self.sign_transactions(transactions)
        return [result.signature for result in results]

    async def sign_transactions(self, transactions: Sequence[bytes]) -> list[SigningResult]:
        """Sign a batch and return full results in input order.

        Raises:
            ValidationError: A member returned no, several, or malformed signatures
            HttpError / NetworkError: A member submission failed
        """
        if not transactions:
            return []

        outcomes = await asyncio.gather(
            *(self._sign_one(index, tx) for index, tx in enumerate(transactions)),
            return_exceptions=True,
        )

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            succeeded = len(outcomes) - len(failures)
            logger.error(
                f"Fordefi batch failed: {len(failures)} of {len(outcomes)} members failed, "
                f"{succeeded} completed remotely and are not rolled back"
            )
            raise failures[0]

        return list(outcomes)

    async def _sign_one(self, index: int, transaction: bytes) -> SigningResult:
        options = self.options.for_batch_member(index)
        job = await self.submitter.create_and_wait_transaction(
            self.vault_id,
            bytes(transaction),
            self.chain,
            options,
        )
        result = extract_signature(job, index)
        logger.info(f"Transaction {index} signed by Fordefi: {result.signature_b58}")
        return result

    async def get_vault_address(self) -> str:
        """Wallet address as reported by Fordefi."""
        return await self.submitter.get_wallet_address()

    async def health_check(self) -> bool:
        """Check that the API credentials authenticate."""
        try:
            await self.submitter.api.auth.authenticate()
            return True
        except FordefiError as e:
            logger.warning(f"Fordefi health check failed: {e}")
            return False

    async def aclose(self) -> None:
        """Close the API client's HTTP connections."""
        await self.submitter.api.aclose()

    async def __aenter__(self) -> "FordefiSigner":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False


def extract_signature(job: TransactionJob, index: int) -> SigningResult:
    """Validate a finished job and return its single signature.

    Raises:
        ValidationError: Not exactly one signature, or it is not 64 bytes
    """
    if not job.signatures:
        logger.error(f"No signature returned for transaction {index} (job {job.id}, state {job.state.value})")
        raise ValidationError(f"No signature returned for transaction {index}")

    if len(job.signatures) != 1:
        logger.error(f"Transaction {index} returned {len(job.signatures)} signatures (job {job.id})")
        raise ValidationError(
            f"Expected exactly one signature for transaction {index}, got {len(job.signatures)}"
        )

    entry = job.signatures[0]
    try:
        signature = base64.b64decode(entry.signature, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Transaction {index} returned a non-base64 signature (job {job.id})")
        raise ValidationError(f"Signature for transaction {index} is not valid base64") from e

    if len(signature) != SIGNATURE_LENGTH:
        logger.error(f"Transaction {index} returned a {len(signature)}-byte signature (job {job.id})")
        raise ValidationError(
            f"Invalid signature length: {len(signature)}, expected {SIGNATURE_LENGTH} bytes"
        )

    return SigningResult(
        index=index,
        signature=signature,
        public_key=entry.public_key,
        transaction_id=job.id,
    )
