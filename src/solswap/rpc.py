"""Minimal async Solana JSON-RPC client."""

import asyncio
import base64
import logging
from itertools import count
from typing import Any, Optional

import httpx

from solswap.exceptions import (
    BlockhashExpiredError,
    ConfirmationTimeoutError,
    RpcError,
    TransactionFailedError,
)

logger = logging.getLogger(__name__)

SOLANA_RPC = "https://api.mainnet-beta.solana.com"

COMMITMENT_ORDER = ("processed", "confirmed", "finalized")


def _commitment_reached(status: Optional[str], commitment: str) -> bool:
    if status not in COMMITMENT_ORDER:
        return False
    return COMMITMENT_ORDER.index(status) >= COMMITMENT_ORDER.index(commitment)


class SolanaRpcClient:
    """JSON-RPC client for the calls the swap pipeline needs.

    Every call is a self-contained request/response; the client holds no
    per-request state and is safe to share across tasks.
    """

    def __init__(
        self,
        rpc_url: str = SOLANA_RPC,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._ids = count(1)

    async def call(self, method: str, params: Optional[list] = None) -> Any:
        """Send a JSON-RPC request and return its `result`.

        Raises:
            RpcError: On transport failure, non-200 status or a JSON-RPC error
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as e:
            raise RpcError(f"{method} request failed: {e}") from e

        if response.status_code != 200:
            raise RpcError(f"{method} HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise RpcError(f"{method} returned invalid JSON") from e

        if "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                raise RpcError(
                    f"{method}: {error.get('message', error)}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcError(f"{method}: {error}")

        if "result" not in data:
            raise RpcError(f"{method} response has no result")
        return data["result"]

    @staticmethod
    def _value(result: Any, method: str) -> Any:
        """Unwrap the {context, value} envelope used by most account methods."""
        if not isinstance(result, dict) or "value" not in result:
            raise RpcError(f"{method} response missing value")
        return result["value"]

    async def get_balance(self, address: str, commitment: str = "confirmed") -> int:
        """Get native balance in lamports."""
        result = await self.call("getBalance", [address, {"commitment": commitment}])
        value = self._value(result, "getBalance")
        if not isinstance(value, int):
            raise RpcError(f"getBalance returned non-integer value: {value!r}")
        return value

    async def get_parsed_token_accounts(self, owner: str, mint: str) -> list[dict]:
        """Get jsonParsed token accounts owned by `owner` for `mint`."""
        result = await self.call(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "jsonParsed", "commitment": "confirmed"}],
        )
        return self._value(result, "getTokenAccountsByOwner")

    async def get_raw_token_accounts(self, owner: str, mint: str) -> list[bytes]:
        """Get raw (base64) token account data owned by `owner` for `mint`."""
        result = await self.call(
            "getTokenAccountsByOwner",
            [owner, {"mint": mint}, {"encoding": "base64", "commitment": "confirmed"}],
        )
        accounts = self._value(result, "getTokenAccountsByOwner")
        raw = []
        for item in accounts:
            data = item["account"]["data"]
            # Encoded as [payload, "base64"]
            encoded = data[0] if isinstance(data, list) else data
            raw.append(base64.b64decode(encoded))
        return raw

    async def get_block_height(self, commitment: str = "confirmed") -> int:
        return await self.call("getBlockHeight", [{"commitment": commitment}])

    async def send_raw_transaction(self, signed: bytes) -> str:
        """Submit signed transaction bytes verbatim.

        Returns:
            Transaction signature (base58)
        """
        return await self.call(
            "sendTransaction",
            [
                base64.b64encode(signed).decode(),
                {
                    "encoding": "base64",
                    "skipPreflight": False,
                    "preflightCommitment": "confirmed",
                },
            ],
        )

    async def get_signature_status(self, signature: str) -> Optional[dict]:
        result = await self.call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        statuses = self._value(result, "getSignatureStatuses")
        return statuses[0] if statuses else None

    async def _poll_status(
        self, signature: str, last_valid_block_height: Optional[int]
    ) -> Optional[dict]:
        """One status poll, raising BlockhashExpiredError once the signature can no longer land."""
        status = await self.get_signature_status(signature)
        if status is not None or last_valid_block_height is None:
            return status

        height = await self.get_block_height()
        if height <= last_valid_block_height:
            return None

        # The transaction may have landed between the two reads
        status = await self.get_signature_status(signature)
        if status is None:
            raise BlockhashExpiredError(signature, last_valid_block_height)
        return status

    async def confirm_transaction(
        self,
        signature: str,
        commitment: str = "confirmed",
        timeout: float = 60.0,
        poll_interval: float = 2.0,
        last_valid_block_height: Optional[int] = None,
    ) -> dict:
        """Wait for a transaction to reach `commitment`.

        Args:
            signature: Transaction signature to wait for
            commitment: Target commitment level
            timeout: Maximum seconds to wait, including time spent in RPC calls
            poll_interval: Seconds between status polls
            last_valid_block_height: Stop early once the chain passes this height

        Returns:
            Final signature status dict

        Raises:
            TransactionFailedError: If the transaction landed with an error
            BlockhashExpiredError: If the blockhash expired before landing
            ConfirmationTimeoutError: If not confirmed within timeout (outcome unknown)
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ConfirmationTimeoutError(signature, timeout)

            try:
                status = await asyncio.wait_for(
                    self._poll_status(signature, last_valid_block_height), remaining
                )
            except asyncio.TimeoutError:
                raise ConfirmationTimeoutError(signature, timeout) from None
            except RpcError as e:
                # Transient node errors do not decide the outcome
                logger.warning(f"Status poll for {signature} failed: {e}")
                status = None

            if status is not None:
                if status.get("err") is not None:
                    raise TransactionFailedError(signature, status["err"])
                if _commitment_reached(status.get("confirmationStatus"), commitment):
                    return status

            if loop.time() + poll_interval > deadline:
                raise ConfirmationTimeoutError(signature, timeout)
            await asyncio.sleep(poll_interval)
