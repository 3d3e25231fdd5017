"""Swap request and quote types shared by the pipeline stages."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from solswap.tokens import get_asset, is_valid_address


def _asset_key(symbol_or_mint: str) -> str:
    """Mint for known assets so a symbol and its mint compare equal."""
    asset = get_asset(symbol_or_mint)
    return asset.mint if asset else symbol_or_mint.upper()


class SwapRequest(BaseModel):
    """A user's desired swap."""

    model_config = {"frozen": True}

    source_asset: str = Field(..., description="Source token symbol or mint (e.g., USDC)")
    destination_asset: str = Field(..., description="Destination token symbol or mint")
    source_amount: Decimal = Field(..., gt=0, description="Amount of source token to swap")
    slippage_bps: int = Field(
        default=50, ge=10, le=500, description="Slippage tolerance in basis points"
    )
    requester: str = Field(..., description="Signing wallet public key")
    destination: Optional[str] = Field(
        default=None, description="Third-party wallet receiving the output (None = requester)"
    )

    @field_validator("requester")
    @classmethod
    def validate_requester(cls, v: str) -> str:
        if not is_valid_address(v):
            raise ValueError("Invalid Solana address for requester")
        return v

    @field_validator("destination", mode="before")
    @classmethod
    def validate_destination(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank input as no override."""
        if v is None or not str(v).strip():
            return None
        v = str(v).strip()
        if not is_valid_address(v):
            raise ValueError("Invalid Solana address for destination")
        return v

    @model_validator(mode="after")
    def check_distinct_assets(self) -> "SwapRequest":
        if _asset_key(self.source_asset) == _asset_key(self.destination_asset):
            raise ValueError("Source and destination assets must differ")
        return self


@dataclass(frozen=True)
class Quote:
    """A priced route from the aggregator.

    `route` is the aggregator's full response body. It must reach the
    transaction builder unmodified.
    """

    input_mint: str
    output_mint: str
    in_amount: int  # base units
    out_amount: int  # base units, estimate
    slippage_bps: int
    route: dict[str, Any] = field(repr=False)

    @property
    def price_impact_pct(self) -> Decimal:
        return Decimal(str(self.route.get("priceImpactPct") or "0"))

    @property
    def dex_path(self) -> list[str]:
        """Labels of the venues the route passes through."""
        return [
            step.get("swapInfo", {}).get("label", "Unknown")
            for step in self.route.get("routePlan", [])
        ]
