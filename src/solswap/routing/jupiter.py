"""Jupiter DEX aggregator integration for Solana.

Uses Jupiter Aggregator API for quotes and prebuilt swap transactions.
API docs: https://station.jup.ag/docs/apis/swap-api
"""

import logging
from decimal import Decimal
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from solswap.config import FeeConfig
from solswap.exceptions import BuildError, QuoteError
from solswap.routing.base import Quote
from solswap.swap.envelope import TransactionEnvelope, decode_envelope
from solswap.tokens import Asset, from_base_units, get_asset, to_base_units

logger = logging.getLogger(__name__)

# Jupiter API endpoint
JUPITER_API_V6 = "https://quote-api.jup.ag/v6"


class QuoteResponseSchema(BaseModel):
    """Required fields of a /quote response; everything else is passed through."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    input_mint: str = Field(..., alias="inputMint")
    output_mint: str = Field(..., alias="outputMint")
    in_amount: int = Field(..., alias="inAmount", ge=0)
    out_amount: int = Field(..., alias="outAmount", ge=0)
    route_plan: list[dict[str, Any]] = Field(..., alias="routePlan", min_length=1)


class SwapResponseSchema(BaseModel):
    """Required fields of a /swap response."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    swap_transaction: str = Field(..., alias="swapTransaction", min_length=1)
    last_valid_block_height: Optional[int] = Field(None, alias="lastValidBlockHeight")


def _error_detail(response: httpx.Response) -> str:
    """Pull the `error` field out of an error body, falling back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text or "Unknown error"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text or "Unknown error"


class JupiterClient:
    """Client for the Jupiter quote and swap endpoints.

    Jupiter aggregates liquidity from Raydium, Orca, Meteora and other
    Solana DEXes and returns a ready-to-sign transaction for the best route.
    """

    def __init__(
        self,
        base_url: str = JUPITER_API_V6,
        api_key: Optional[str] = None,
        fee: Optional[FeeConfig] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Jupiter client.

        Args:
            base_url: Aggregator API base URL
            api_key: Optional API key for higher rate limits
            fee: Platform fee configuration (None = no fee)
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.fee = fee or FeeConfig()
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> dict:
        """Get API headers."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    @staticmethod
    def _resolve(symbol_or_mint: str) -> Asset:
        asset = get_asset(symbol_or_mint)
        if asset is None:
            raise QuoteError(f"Unsupported asset: {symbol_or_mint}")
        return asset

    async def get_quote(
        self,
        source_asset: str,
        destination_asset: str,
        amount: Decimal,
        slippage_bps: int,
    ) -> Quote:
        """Get swap quote from Jupiter.

        Args:
            source_asset: Source token symbol or mint
            destination_asset: Destination token symbol or mint
            amount: Amount in human-readable units
            slippage_bps: Max slippage in basis points

        Returns:
            Validated Quote

        Raises:
            QuoteError: On unsupported asset, dust amount, HTTP failure or
                a response without a usable route
        """
        source = self._resolve(source_asset)
        destination = self._resolve(destination_asset)

        amount_base = to_base_units(amount, source.decimals)
        if amount_base <= 0:
            raise QuoteError(
                f"Amount {amount} {source.symbol} is below one base unit "
                f"({source.decimals} decimals)"
            )

        logger.info(
            f"Requesting quote: {amount} {source.symbol} -> {destination.symbol} "
            f"(slippage: {slippage_bps} bps)"
        )

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/quote",
                    headers=self._get_headers(),
                    params={
                        "inputMint": source.mint,
                        "outputMint": destination.mint,
                        "amount": str(amount_base),
                        "slippageBps": str(slippage_bps),
                    },
                )
        except httpx.HTTPError as e:
            logger.error(f"Jupiter quote request failed: {e}")
            raise QuoteError(f"Quote request failed: {e}") from e

        if not response.is_success:
            detail = _error_detail(response)
            logger.error(f"Jupiter quote error: {response.status_code} - {detail}")
            raise QuoteError(f"Error fetching quote: {detail}")

        try:
            data = response.json()
            parsed = QuoteResponseSchema.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise QuoteError(f"Quote response has no usable route: {e}") from e

        quote = Quote(
            input_mint=parsed.input_mint,
            output_mint=parsed.output_mint,
            in_amount=parsed.in_amount,
            out_amount=parsed.out_amount,
            slippage_bps=slippage_bps,
            route=data,
        )
        logger.info(
            f"Quote received: {from_base_units(quote.in_amount, source.decimals)} {source.symbol} -> "
            f"~{from_base_units(quote.out_amount, destination.decimals)} {destination.symbol} "
            f"via {' -> '.join(quote.dex_path)}"
        )
        return quote

    async def build_swap_transaction(
        self,
        quote: Quote,
        requester: str,
        destination: Optional[str] = None,
    ) -> TransactionEnvelope:
        """Build the unsigned swap transaction for a quote.

        Args:
            quote: Quote from get_quote, passed through unmodified
            requester: Public key of the signing wallet
            destination: Optional wallet receiving the output tokens

        Returns:
            Decoded TransactionEnvelope

        Raises:
            BuildError: On HTTP failure or a missing/undecodable payload
        """
        body: dict[str, Any] = {
            "quoteResponse": quote.route,
            "userPublicKey": requester,
            "wrapAndUnwrapSol": True,
        }
        if destination:
            body["destinationWallet"] = destination
        if self.fee.enabled:
            body["platformFeeBps"] = self.fee.fee_bps
            body["feeAccount"] = self.fee.fee_account

        logger.info(
            f"Building swap transaction for {requester}"
            + (f" (destination: {destination})" if destination else "")
        )

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/swap",
                    headers=self._get_headers(),
                    json=body,
                )
        except httpx.HTTPError as e:
            logger.error(f"Jupiter swap request failed: {e}")
            raise BuildError(f"Swap request failed: {e}") from e

        if not response.is_success:
            detail = _error_detail(response)
            logger.error(f"Jupiter swap error: {response.status_code} - {detail}")
            raise BuildError(f"Error creating swap transaction: {detail}")

        try:
            parsed = SwapResponseSchema.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise BuildError(f"Swap response missing transaction: {e}") from e

        envelope = decode_envelope(parsed.swap_transaction, parsed.last_valid_block_height)
        logger.info(f"{envelope.kind.value.capitalize()} transaction built ({len(envelope.payload)} bytes)")
        return envelope
