"""solswap: Jupiter-routed token swaps and wallet balances on Solana."""

from solswap.exceptions import (
    BalanceQueryError,
    BroadcastError,
    BuildError,
    ConfirmationTimeoutError,
    QuoteError,
    SigningError,
    SolswapError,
    SwapInProgressError,
)
from solswap.routing.base import Quote, SwapRequest
from solswap.services.balance import BalanceSnapshot, BalanceStatus
from solswap.services.swap_service import SwapService
from solswap.swap.executor import SubmissionResult

__version__ = "0.1.0"

__all__ = [
    "SwapService",
    "SwapRequest",
    "Quote",
    "SubmissionResult",
    "BalanceSnapshot",
    "BalanceStatus",
    "SolswapError",
    "QuoteError",
    "BuildError",
    "SigningError",
    "BroadcastError",
    "ConfirmationTimeoutError",
    "BalanceQueryError",
    "SwapInProgressError",
]
