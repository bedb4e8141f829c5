"""Pydantic contracts for Fordefi API payloads."""

from fordefi_signer.contracts.transactions import (
    ChainInfo,
    CreateTransactionRequest,
    JobSignature,
    Mode,
    TERMINAL_STATES,
    TransactionJob,
    TransactionState,
    TransactionType,
)

__all__ = [
    "ChainInfo",
    "CreateTransactionRequest",
    "JobSignature",
    "Mode",
    "TERMINAL_STATES",
    "TransactionJob",
    "TransactionState",
    "TransactionType",
]
