"""Token registry and exact unit conversion for Solana assets."""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Optional

import base58

# Native SOL decimals (1 SOL = 10^9 lamports)
NATIVE_DECIMALS = 9


@dataclass(frozen=True)
class Asset:
    """An SPL token known to the registry."""

    symbol: str
    mint: str
    decimals: int


# Token mint addresses on Solana mainnet
SOLANA_TOKENS = {
    "SOL": Asset("SOL", "So11111111111111111111111111111111111111112", 9),  # Wrapped SOL
    "USDC": Asset("USDC", "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", 6),
    "USDT": Asset("USDT", "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", 6),
    "RAY": Asset("RAY", "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R", 6),
    "ORCA": Asset("ORCA", "orcaEKTdK7LKz57vaAYr9QeNsVEPfiu6QeMU1kektZE", 6),
    "JUP": Asset("JUP", "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN", 6),
    "BONK": Asset("BONK", "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", 5),
    "WIF": Asset("WIF", "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm", 6),
    "PYTH": Asset("PYTH", "HZ1JovNiVvGrGNiiYvEozEVgZ58xaU3RKwX8eACQBCt3", 6),
}

_BY_MINT = {asset.mint: asset for asset in SOLANA_TOKENS.values()}


def get_asset(symbol_or_mint: str) -> Optional[Asset]:
    """Look up an asset by symbol (case-insensitive) or mint address."""
    return SOLANA_TOKENS.get(symbol_or_mint.upper()) or _BY_MINT.get(symbol_or_mint)


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Convert a human amount to integer base units.

    Uses Decimal arithmetic only. Digits below the smallest unit are
    truncated, so the result never exceeds the requested amount.
    """
    scaled = Decimal(amount).scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(amount: int, decimals: int) -> Decimal:
    """Convert integer base units to a human Decimal amount."""
    return Decimal(int(amount)).scaleb(-decimals)


def is_valid_address(address: str) -> bool:
    """Check that a string is a base58-encoded 32-byte public key."""
    if not address or not 32 <= len(address) <= 44:
        return False
    try:
        return len(base58.b58decode(address)) == 32
    except ValueError:
        return False
