"""Swap service: the public entry points for swaps and balance refresh.

Flow for request_swap:
1. Take the requester's swap slot (one in-flight swap per wallet)
2. Quote from Jupiter
3. Build the unsigned transaction
4. Sign, broadcast and confirm through a fresh SubmissionCoordinator
"""

import logging
from typing import Optional

from solswap.config import Settings, get_settings
from solswap.rpc import SolanaRpcClient
from solswap.routing.base import Quote, SwapRequest
from solswap.routing.jupiter import JupiterClient
from solswap.services.balance import BalanceResolver, BalanceSnapshot
from solswap.signing.base import TransactionSigner
from solswap.swap.executor import SubmissionCoordinator, SubmissionResult
from solswap.utils.locks import WalletSwapLock

logger = logging.getLogger(__name__)


class SwapService:
    """Orchestrates quote -> build -> submit, and balance snapshots."""

    def __init__(
        self,
        jupiter: JupiterClient,
        rpc: SolanaRpcClient,
        signer: TransactionSigner,
        confirm_timeout: float = 60.0,
        poll_interval: float = 2.0,
        balance_resolver: Optional[BalanceResolver] = None,
    ):
        self.jupiter = jupiter
        self.rpc = rpc
        self.signer = signer
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval
        self.balances = balance_resolver or BalanceResolver(rpc)

    @classmethod
    def from_settings(
        cls, signer: TransactionSigner, settings: Optional[Settings] = None
    ) -> "SwapService":
        """Create a service wired from application settings."""
        settings = settings or get_settings()
        jupiter = JupiterClient(
            base_url=settings.jupiter_api_url,
            api_key=settings.jupiter_api_key,
            fee=settings.fee_config(),
            timeout=settings.http_timeout,
        )
        rpc = SolanaRpcClient(settings.sol_rpc_url, timeout=settings.http_timeout)
        return cls(
            jupiter=jupiter,
            rpc=rpc,
            signer=signer,
            confirm_timeout=settings.confirm_timeout_seconds,
            poll_interval=settings.confirm_poll_interval,
        )

    async def quote(self, request: SwapRequest) -> Quote:
        """Preview a swap without building or signing anything."""
        return await self.jupiter.get_quote(
            request.source_asset,
            request.destination_asset,
            request.source_amount,
            request.slippage_bps,
        )

    async def request_swap(self, request: SwapRequest) -> SubmissionResult:
        """Execute a swap end to end.

        Raises:
            SwapInProgressError: Another swap is in flight for the requester
            QuoteError, BuildError, SigningError, BroadcastError:
                The stage that failed; nothing later ran
            ConfirmationTimeoutError: Outcome unknown; do not resubmit
        """
        logger.info(
            f"Swap requested: {request.source_amount} {request.source_asset} -> "
            f"{request.destination_asset} for {request.requester}"
            + (f" (destination: {request.destination})" if request.destination else "")
        )

        async with WalletSwapLock(request.requester):
            quote = await self.quote(request)
            envelope = await self.jupiter.build_swap_transaction(
                quote, request.requester, request.destination
            )
            coordinator = SubmissionCoordinator(
                self.rpc,
                confirm_timeout=self.confirm_timeout,
                poll_interval=self.poll_interval,
            )
            return await coordinator.submit(envelope, self.signer, request.destination)

    async def refresh_balances(self, owner: str, token: str = "USDC") -> BalanceSnapshot:
        """Resolve a fresh balance snapshot for a wallet."""
        return await self.balances.resolve_balances(owner, token)
