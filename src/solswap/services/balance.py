"""Wallet balance resolution with a fallback token-balance strategy.

Native SOL comes from getBalance. Token balances are tried through an
ordered list of strategies. The first one that returns wins, and a later
strategy only runs when every earlier one raised.
"""

import logging
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from solswap.exceptions import BalanceQueryError, RpcError
from solswap.rpc import SolanaRpcClient
from solswap.tokens import NATIVE_DECIMALS, Asset, from_base_units, get_asset

logger = logging.getLogger(__name__)

# SPL token account layout: mint (32) + owner (32) + amount (u64 LE) + ...
TOKEN_ACCOUNT_AMOUNT_OFFSET = 64
TOKEN_ACCOUNT_MIN_LENGTH = TOKEN_ACCOUNT_AMOUNT_OFFSET + 8

# Errors a strategy may raise on malformed node responses
STRATEGY_ERRORS = (RpcError, KeyError, TypeError, ValueError, ArithmeticError)


class BalanceStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"  # native known, token unknown
    FAILED = "failed"


@dataclass
class BalanceSnapshot:
    """Point-in-time balances for one wallet. Never cached."""

    native_amount: Optional[Decimal]
    token_amount: Optional[Decimal]
    status: BalanceStatus
    token_symbol: str = "USDC"
    token_source: Optional[str] = None
    error: Optional[BalanceQueryError] = None

    def raise_for_status(self) -> None:
        """Raise the carried BalanceQueryError unless the snapshot is complete."""
        if self.error is not None:
            raise self.error


def decode_token_account_amount(data: bytes) -> int:
    """Extract the raw amount from SPL token account data."""
    if len(data) < TOKEN_ACCOUNT_MIN_LENGTH:
        raise ValueError(f"Token account data too short: {len(data)} bytes")
    (amount,) = struct.unpack_from("<Q", data, TOKEN_ACCOUNT_AMOUNT_OFFSET)
    return amount


class TokenBalanceStrategy(ABC):
    """One way of reading per-account token amounts."""

    name: str = "base"

    @abstractmethod
    async def fetch(self, rpc: SolanaRpcClient, owner: str, asset: Asset) -> list[Decimal]:
        """Return the human amount of each matching token account."""
        pass


class ParsedTokenAccountsStrategy(TokenBalanceStrategy):
    """Reads node-parsed (jsonParsed) token accounts."""

    name = "parsed"

    async def fetch(self, rpc: SolanaRpcClient, owner: str, asset: Asset) -> list[Decimal]:
        accounts = await rpc.get_parsed_token_accounts(owner, asset.mint)
        amounts = []
        for item in accounts:
            token_amount = item["account"]["data"]["parsed"]["info"]["tokenAmount"]
            ui_amount = token_amount.get("uiAmountString")
            if ui_amount is None:
                ui_amount = token_amount["uiAmount"]
            amounts.append(Decimal(str(ui_amount or 0)))
        return amounts


class RawTokenAccountsStrategy(TokenBalanceStrategy):
    """Decodes raw token account bytes and scales by the token's decimals."""

    name = "raw"

    async def fetch(self, rpc: SolanaRpcClient, owner: str, asset: Asset) -> list[Decimal]:
        accounts = await rpc.get_raw_token_accounts(owner, asset.mint)
        return [
            from_base_units(decode_token_account_amount(data), asset.decimals)
            for data in accounts
        ]


DEFAULT_STRATEGIES: tuple[TokenBalanceStrategy, ...] = (
    ParsedTokenAccountsStrategy(),
    RawTokenAccountsStrategy(),
)


class BalanceResolver:
    """Resolves native and token balances for a wallet."""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        strategies: Sequence[TokenBalanceStrategy] = DEFAULT_STRATEGIES,
    ):
        if not strategies:
            raise ValueError("At least one token balance strategy is required")
        self.rpc = rpc
        self.strategies = tuple(strategies)

    async def get_native_balance(self, owner: str) -> Decimal:
        lamports = await self.rpc.get_balance(owner)
        return from_base_units(lamports, NATIVE_DECIMALS)

    async def get_token_balance(self, owner: str, asset: Asset) -> tuple[Decimal, str]:
        """Largest single-account balance for `asset`, via the first working strategy.

        Returns:
            Tuple of (amount, strategy name)

        Raises:
            The first strategy's error if every strategy fails
        """
        primary_error: Optional[Exception] = None

        for strategy in self.strategies:
            try:
                amounts = await strategy.fetch(self.rpc, owner, asset)
            except STRATEGY_ERRORS as e:
                if primary_error is None:
                    primary_error = e
                    logger.warning(
                        f"{asset.symbol} balance via {strategy.name} accounts failed: {e}; "
                        "trying fallback"
                    )
                else:
                    logger.error(f"{asset.symbol} balance via {strategy.name} accounts also failed: {e}")
                continue

            logger.debug(f"Found {len(amounts)} {asset.symbol} token account(s) via {strategy.name}")
            # Largest account, not the sum
            return max(amounts, default=Decimal("0")), strategy.name

        raise primary_error

    async def resolve_balances(self, owner: str, token: str = "USDC") -> BalanceSnapshot:
        """Resolve a fresh balance snapshot. Never raises for query failures."""
        asset = get_asset(token)
        if asset is None:
            raise ValueError(f"Unsupported token: {token}")

        try:
            native = await self.get_native_balance(owner)
        except STRATEGY_ERRORS as e:
            logger.error(f"Failed to get SOL balance for {owner}: {e}")
            return BalanceSnapshot(
                native_amount=None,
                token_amount=None,
                status=BalanceStatus.FAILED,
                token_symbol=asset.symbol,
                error=BalanceQueryError(
                    f"SOL balance unavailable: {e}", status=BalanceStatus.FAILED, cause=e
                ),
            )

        try:
            token_amount, source = await self.get_token_balance(owner, asset)
        except STRATEGY_ERRORS as e:
            # Both token paths failed: e is the primary path error
            logger.error(f"Failed to get {asset.symbol} balance for {owner}: {e}")
            return BalanceSnapshot(
                native_amount=None,
                token_amount=None,
                status=BalanceStatus.FAILED,
                token_symbol=asset.symbol,
                error=BalanceQueryError(
                    f"{asset.symbol} balance unavailable: {e}",
                    status=BalanceStatus.FAILED,
                    cause=e,
                ),
            )

        logger.info(f"Balances for {owner}: {native} SOL, {token_amount} {asset.symbol}")
        return BalanceSnapshot(
            native_amount=native,
            token_amount=token_amount,
            status=BalanceStatus.COMPLETE,
            token_symbol=asset.symbol,
            token_source=source,
        )
