"""Environment configuration loaded via Pydantic Settings.

Variables use the ``POLYMARKET_`` prefix, e.g. ``POLYMARKET_CHAIN_ID`` or
``POLYMARKET_BUILDER_API_KEY``. A ``.env`` file in the working directory
is read when present.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .auth.credentials import ApiKeyCredential, BuilderCredential
from .config import POLYGON


class Settings(BaseSettings):
    """SDK configuration (from env POLYMARKET_*)."""

    model_config = SettingsConfigDict(
        env_prefix="POLYMARKET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    chain_id: int = Field(default=POLYGON, description="Chain ID (137 Polygon, 80002 Amoy).")
    clob_host: str = Field(
        default="https://clob.polymarket.com",
        description="CLOB API base URL.",
    )
    relayer_host: str = Field(
        default="https://relayer-v2.polymarket.com",
        description="Relayer API base URL.",
    )
    rpc_url: str = Field(
        default="https://polygon-rpc.com/",
        description="JSON-RPC endpoint used for on-chain reads.",
    )
    http_timeout: float = Field(default=15.0, ge=1.0, le=120.0)

    # Signer (exactly one of these)
    private_key: Optional[str] = Field(default=None, description="Local wallet private key.")
    custodial_account: Optional[str] = Field(
        default=None,
        description="Custodial account address signed for by the remote backend.",
    )

    # L2 trading credential
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    api_passphrase: Optional[str] = None

    # Builder attribution credential
    builder_api_key: Optional[str] = None
    builder_secret: Optional[str] = None
    builder_passphrase: Optional[str] = None

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = False

    def api_credential(self) -> Optional[ApiKeyCredential]:
        """Return the trading credential, or None if any part is missing."""
        if not (self.api_key and self.api_secret and self.api_passphrase):
            return None
        return ApiKeyCredential(
            key=self.api_key,
            secret=self.api_secret,
            passphrase=self.api_passphrase,
        )

    def builder_credential(self) -> Optional[BuilderCredential]:
        """Return the builder credential, or None if any part is missing."""
        creds = BuilderCredential(
            key=self.builder_api_key or "",
            secret=self.builder_secret or "",
            passphrase=self.builder_passphrase or "",
        )
        return creds if creds.is_valid() else None


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()


__all__ = ["Settings", "get_settings"]
