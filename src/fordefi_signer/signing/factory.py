"""Signer factory.

Builds a Fordefi-backed signer from application settings. This is the only
place credentials are read from the environment (via ``config.Settings``).
"""

import logging
from typing import Optional

import httpx

from fordefi_signer.api.base import AuthenticationError
from fordefi_signer.api.client import ApiClient
from fordefi_signer.api.transactions import TransactionOptions, TransactionSubmitter
from fordefi_signer.config import Settings, get_settings
from fordefi_signer.signing.base import TransactionSendingSigner
from fordefi_signer.signing.fordefi import FordefiSigner

logger = logging.getLogger(__name__)


def create_fordefi_signer(
    address: str,
    vault_id: Optional[str] = None,
    chain: Optional[str] = None,
    options: Optional[TransactionOptions] = None,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FordefiSigner:
    """Create a Fordefi signer.

    Args:
        address: Vault address transactions are signed for
        vault_id: Fordefi vault ID (defaults to FORDEFI_VAULT_ID)
        chain: Chain identifier (defaults to FORDEFI_CHAIN)
        options: Options applied to every submission
        settings: Settings to use instead of the cached environment settings
        transport: Optional httpx transport

    Returns:
        FordefiSigner

    Raises:
        AuthenticationError: API key or secret not configured
        ValueError: No vault ID given or configured
    """
    settings = settings or get_settings()

    if not settings.has_credentials:
        logger.error("FORDEFI_API_KEY and FORDEFI_API_SECRET must be set")
        raise AuthenticationError("Fordefi API credentials are not configured")

    vault_id = vault_id or settings.fordefi_vault_id
    if not vault_id:
        raise ValueError("Fordefi vault ID is required")

    api = ApiClient.from_settings(settings, transport=transport)
    submitter = TransactionSubmitter.from_settings(settings, api=api)

    chain = chain or settings.fordefi_chain
    logger.info(f"Initializing Fordefi signer for vault {vault_id} on {chain}")
    return FordefiSigner(address, vault_id, chain, submitter, options=options)


async def get_signer_info(signer: TransactionSendingSigner) -> dict:
    """Get information about a signer.

    Returns:
        Dict with signer type, address, health status and class
    """
    health = await signer.health_check()

    return {
        "type": signer.signer_type.value,
        "address": signer.address,
        "healthy": health,
        "class": signer.__class__.__name__,
    }
