"""Application configuration using pydantic-settings."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class FeeConfig:
    """Platform fee passed explicitly to the transaction builder.

    Fee parameters are only sent to the aggregator when fee_account is set.
    """

    fee_bps: int = 0
    fee_account: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.fee_account is not None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Runtime
    # ======================
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Solana RPC
    # ======================
    sol_rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com", description="Solana RPC URL"
    )
    confirm_timeout_seconds: float = Field(
        default=60.0, gt=0, description="Max seconds to wait for 'confirmed' commitment"
    )
    confirm_poll_interval: float = Field(
        default=2.0, gt=0, description="Seconds between confirmation status polls"
    )

    # ======================
    # Jupiter Aggregator
    # ======================
    jupiter_api_url: str = Field(
        default="https://quote-api.jup.ag/v6", description="Jupiter swap API base URL"
    )
    jupiter_api_key: Optional[str] = Field(
        default=None, description="Optional API key for higher rate limits"
    )
    default_slippage_bps: int = Field(
        default=50, ge=10, le=500, description="Default slippage tolerance (0.5%)"
    )
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout")

    # ======================
    # Platform Fee
    # ======================
    platform_fee_bps: int = Field(default=0, ge=0, description="Platform fee in basis points")
    platform_fee_account: Optional[str] = Field(
        default=None, description="Token account receiving the platform fee"
    )

    # ======================
    # Wallet
    # ======================
    balance_token: str = Field(default="USDC", description="Token shown next to SOL balance")
    wallet_keypair: Optional[str] = Field(
        default=None,
        description="Local signer secret key (base58 or solana-keygen JSON array)",
    )

    @property
    def has_wallet(self) -> bool:
        """Check if a local signing keypair is configured."""
        return bool(self.wallet_keypair)

    def fee_config(self) -> FeeConfig:
        """Build the explicit fee configuration for the transaction builder."""
        return FeeConfig(
            fee_bps=self.platform_fee_bps,
            fee_account=self.platform_fee_account or None,
        )

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "debug": self.debug,
            "rpc": self.sol_rpc_url,
            "jupiter": {
                "api": self.jupiter_api_url,
                "api_key": "***" if self.jupiter_api_key else "(not set)",
                "slippage_bps": self.default_slippage_bps,
            },
            "confirmation": {
                "timeout_seconds": self.confirm_timeout_seconds,
                "poll_interval": self.confirm_poll_interval,
            },
            "fee": {
                "bps": self.platform_fee_bps,
                "account": self.platform_fee_account or "(none)",
            },
            "wallet_configured": self.has_wallet,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
