"""Application configuration using pydantic-settings.

Only the composing application (see ``signing.factory``) reads settings; the
client classes take explicit arguments.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fordefi_signer.api.base import DEFAULT_BASE_URL


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Fordefi API
    # ======================
    fordefi_api_key: str = Field(default="", description="Fordefi API user key")
    fordefi_api_secret: str = Field(default="", description="Fordefi API signing secret")
    fordefi_base_url: str = Field(default=DEFAULT_BASE_URL, description="Fordefi API base URL")

    # ======================
    # Signing target
    # ======================
    fordefi_vault_id: Optional[str] = Field(default=None, description="Default vault ID")
    fordefi_chain: str = Field(default="solana_mainnet", description="Default chain identifier")

    # ======================
    # Timeouts (seconds)
    # ======================
    request_timeout: float = Field(default=30.0, description="Local wait bound for ordinary calls")
    create_and_wait_timeout: float = Field(
        default=120.0, description="Local wait bound for create-and-wait when no server timeout is set"
    )
    wait_timeout_margin: float = Field(
        default=10.0, description="Added to a server-side wait timeout to get the local bound"
    )

    # ======================
    # Token handling
    # ======================
    token_ttl: Optional[float] = Field(
        default=None, description="Seconds an access token is trusted locally (unset = until rejected)"
    )
    reauthenticate_on_401: bool = Field(
        default=True, description="Re-authenticate and replay once when a call is rejected with 401"
    )

    @property
    def has_credentials(self) -> bool:
        """Check if both API key and secret are configured."""
        return bool(self.fordefi_api_key and self.fordefi_api_secret)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "fordefi": {
                "base_url": self.fordefi_base_url,
                "api_key": "***" if self.fordefi_api_key else "(not set)",
                "api_secret": "***" if self.fordefi_api_secret else "(not set)",
                "vault_id": self.fordefi_vault_id or "(not set)",
                "chain": self.fordefi_chain,
            },
            "timeouts": {
                "request": self.request_timeout,
                "create_and_wait": self.create_and_wait_timeout,
                "wait_margin": self.wait_timeout_margin,
            },
            "token": {
                "ttl": self.token_ttl,
                "reauthenticate_on_401": self.reauthenticate_on_401,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
