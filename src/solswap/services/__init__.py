"""Services for swaps and wallet balances."""

from solswap.services.balance import (
    BalanceResolver,
    BalanceSnapshot,
    BalanceStatus,
    ParsedTokenAccountsStrategy,
    RawTokenAccountsStrategy,
)
from solswap.services.swap_service import SwapService

__all__ = [
    "BalanceResolver",
    "BalanceSnapshot",
    "BalanceStatus",
    "ParsedTokenAccountsStrategy",
    "RawTokenAccountsStrategy",
    "SwapService",
]
