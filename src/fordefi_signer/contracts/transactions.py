"""Transaction contracts exchanged with the Fordefi API."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransactionType(str, Enum):
    """Transaction types supported by Fordefi."""
    SOLANA_TRANSACTION = "solana_transaction"
    SOLANA_MESSAGE = "solana_message"
    EVM_TRANSACTION = "evm_transaction"
    EVM_MESSAGE = "evm_message"


class TransactionState(str, Enum):
    """Lifecycle state of a Fordefi transaction."""
    CREATED = "created"
    WAITING_FOR_APPROVAL = "waiting_for_approval"
    WAITING_FOR_SIGNATURE = "waiting_for_signature"
    READY_FOR_PUSH = "ready_for_push"
    PUSHED = "pushed"
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({
    TransactionState.COMPLETED,
    TransactionState.FAILED,
    TransactionState.ABORTED,
})


class Mode(str, Enum):
    """Sign / push mode."""
    AUTO = "auto"
    MANUAL = "manual"


class ChainInfo(BaseModel):
    """Chain a transaction was submitted on."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    unique_id: str = Field(..., description="Chain identifier (solana_mainnet, etc.)")
    name: str = Field(default="", description="Chain display name")


class JobSignature(BaseModel):
    """A signature produced by the vault."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    signature: str = Field(..., description="Base64 encoded signature")
    public_key: Optional[str] = Field(None, description="Public key that produced the signature")


class TransactionJob(BaseModel):
    """Snapshot of a transaction as reported by Fordefi."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    state: TransactionState
    vault_id: str
    type: TransactionType
    chain: ChainInfo
    creation_time: Optional[str] = None
    modification_time: Optional[str] = None
    transaction_hash: Optional[str] = None
    signatures: list[JobSignature] = Field(default_factory=list)

    @field_validator("signatures", mode="before")
    @classmethod
    def _null_signatures(cls, value):
        return [] if value is None else value

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


class CreateTransactionRequest(BaseModel):
    """Body of a create-and-wait request.

    Unset optional fields are omitted from the serialized body.
    """

    type: TransactionType = TransactionType.SOLANA_TRANSACTION
    vault_id: str
    chain: str
    transaction: str = Field(..., description="Base64 encoded serialized transaction")
    idempotence_id: Optional[str] = None
    note: Optional[str] = None
    sign_mode: Optional[Mode] = None
    push_mode: Optional[Mode] = None
    timeout: Optional[int] = Field(None, description="Server-side wait in milliseconds")

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
