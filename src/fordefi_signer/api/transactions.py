"""Transaction calls built on the authenticated client.

create-and-wait delegates waiting to the server: one request returns once
the job is terminal or the server-side wait expires. There is no local
polling. A local timeout only bounds how long we wait for the response; it
does not reach the remote job, which may still complete after we give up.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, replace
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from fordefi_signer.api.base import ValidationError
from fordefi_signer.api.client import ApiClient
from fordefi_signer.contracts.transactions import (
    CreateTransactionRequest,
    Mode,
    TransactionJob,
    TransactionType,
)

logger = logging.getLogger(__name__)

CREATE_AND_WAIT_PATH = "/v1/transactions/create-and-wait"
SIGN_PATH = "/v1/transactions/sign"
WALLET_PATH = "/v1/wallets/solana"
TRANSACTION_PATH = "/v1/transactions/{tx_id}"


@dataclass(frozen=True)
class TransactionOptions:
    """Per-submission options.

    Attributes:
        note: Free-text note attached to the transaction
        idempotence_id: Deduplication key for re-submissions
        sign_mode: auto or manual signing
        push_mode: auto or manual broadcast
        timeout: Server-side wait in milliseconds
    """
    note: Optional[str] = None
    idempotence_id: Optional[str] = None
    sign_mode: Optional[Mode] = None
    push_mode: Optional[Mode] = None
    timeout: Optional[int] = None

    def for_batch_member(self, index: int) -> "TransactionOptions":
        """Options for the transaction at ``index`` of a batch.

        Each member gets ``{base}-{index}`` as idempotence id, or none at
        all when no base id is set.
        """
        if not self.idempotence_id:
            return replace(self, idempotence_id=None)
        return replace(self, idempotence_id=f"{self.idempotence_id}-{index}")


class TransactionSubmitter:
    """Fordefi transaction operations."""

    def __init__(
        self,
        api: ApiClient,
        create_and_wait_timeout: float = 120.0,
        wait_timeout_margin: float = 10.0,
    ):
        """Initialize the submitter.

        Args:
            api: Authenticated API client
            create_and_wait_timeout: Local wait (s) when no server timeout is given
            wait_timeout_margin: Added (s) to a server timeout for the local wait
        """
        self.api = api
        self.create_and_wait_timeout = create_and_wait_timeout
        self.wait_timeout_margin = wait_timeout_margin

    @classmethod
    def from_settings(cls, settings, api: Optional[ApiClient] = None) -> "TransactionSubmitter":
        return cls(
            api or ApiClient.from_settings(settings),
            create_and_wait_timeout=settings.create_and_wait_timeout,
            wait_timeout_margin=settings.wait_timeout_margin,
        )

    def _local_timeout(self, options: TransactionOptions) -> float:
        if options.timeout:
            return options.timeout / 1000 + self.wait_timeout_margin
        return self.create_and_wait_timeout

    async def create_and_wait_transaction(
        self,
        vault_id: str,
        transaction: bytes,
        chain: str,
        options: Optional[TransactionOptions] = None,
        transaction_type: TransactionType = TransactionType.SOLANA_TRANSACTION,
    ) -> TransactionJob:
        """Create a transaction and wait server-side for a terminal state.

        Args:
            vault_id: Vault that signs the transaction
            transaction: Serialized transaction bytes
            chain: Chain identifier (e.g. "solana_mainnet")
            options: Note, idempotence id, modes and server wait
            transaction_type: Fordefi transaction type

        Returns:
            Terminal TransactionJob

        Raises:
            ValidationError: Response is not a job, or the job is not terminal
            HttpError / NetworkError: Request failed
        """
        options = options or TransactionOptions()
        request = CreateTransactionRequest(
            type=transaction_type,
            vault_id=vault_id,
            chain=chain,
            transaction=base64.b64encode(bytes(transaction)).decode("ascii"),
            idempotence_id=options.idempotence_id or None,
            note=options.note,
            sign_mode=options.sign_mode,
            push_mode=options.push_mode,
            timeout=options.timeout or None,
        )

        try:
            data = await self.api.post(
                CREATE_AND_WAIT_PATH,
                request.to_payload(),
                timeout=self._local_timeout(options),
            )
            job = self._parse_job(data)
        except Exception as e:
            logger.error(
                f"Error creating and waiting for transaction "
                f"(vault={vault_id}, idempotence_id={options.idempotence_id}): {e}"
            )
            raise

        if not job.is_terminal:
            logger.error(f"Transaction {job.id} returned in non-terminal state {job.state.value}")
            raise ValidationError(
                f"Transaction {job.id} is not in a terminal state: {job.state.value}"
            )

        logger.info(f"Transaction {job.id} finished with state {job.state.value}")
        return job

    async def sign_transaction(self, transaction: bytes) -> bytes:
        """Sign a transaction without creating a managed job.

        Returns:
            Signed transaction bytes
        """
        try:
            data = await self.api.post(
                SIGN_PATH,
                {
                    "transaction": base64.b64encode(bytes(transaction)).decode("ascii"),
                    "network": "solana",
                },
            )
            signed = data.get("signedTransaction") if isinstance(data, dict) else None
            if not signed:
                raise ValidationError("No signed transaction returned")
            try:
                return base64.b64decode(signed, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationError("Signed transaction is not valid base64") from e
        except Exception as e:
            logger.error(f"Error signing transaction with Fordefi: {e}")
            raise

    async def get_wallet_address(self) -> str:
        """Get the Solana wallet address of the API user."""
        try:
            data = await self.api.get(WALLET_PATH)
            return self._require_field(data, "address")
        except Exception as e:
            logger.error(f"Error getting Fordefi wallet address: {e}")
            raise

    async def get_transaction_status(self, tx_id: str) -> str:
        """Get the status of a transaction."""
        try:
            data = await self.api.get(TRANSACTION_PATH.format(tx_id=tx_id))
            return self._require_field(data, "status")
        except Exception as e:
            logger.error(f"Error getting transaction status for {tx_id}: {e}")
            raise

    @staticmethod
    def _parse_job(data) -> TransactionJob:
        if not isinstance(data, dict):
            raise ValidationError("Transaction response is not an object")
        try:
            return TransactionJob.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed transaction response: {e}") from e

    @staticmethod
    def _require_field(data, name: str) -> str:
        value = data.get(name) if isinstance(data, dict) else None
        if not value:
            raise ValidationError(f"Response is missing '{name}'")
        return value
