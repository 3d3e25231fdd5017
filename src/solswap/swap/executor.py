"""Submission coordinator: sign -> broadcast -> confirm.

Nothing here is retried. A blockhash may already have been consumed, so a
retry must start from a fresh quote and build, never from the same signed
bytes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from solswap.exceptions import (
    BroadcastError,
    ConfirmationTimeoutError,
    RpcError,
    SigningError,
    SolswapError,
)
from solswap.rpc import SolanaRpcClient
from solswap.signing.base import TransactionSigner
from solswap.swap.envelope import TransactionEnvelope

logger = logging.getLogger(__name__)


class SubmissionState(str, Enum):
    """Stages of a single submission."""

    BUILT = "built"
    SIGNING = "signing"
    SIGNED = "signed"
    BROADCASTING = "broadcasting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a confirmed swap."""

    signature: str
    destination_overridden: bool

    @property
    def explorer_url(self) -> str:
        return f"https://explorer.solana.com/tx/{self.signature}"


class SubmissionCoordinator:
    """Drives one envelope through signing, broadcast and confirmation."""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        confirm_timeout: float = 60.0,
        poll_interval: float = 2.0,
        commitment: str = "confirmed",
    ):
        self.rpc = rpc
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval
        self.commitment = commitment
        self.state = SubmissionState.BUILT
        self.signature: Optional[str] = None

    def _transition(self, state: SubmissionState) -> None:
        logger.debug(f"Submission {self.state.value} -> {state.value}")
        self.state = state

    async def submit(
        self,
        envelope: TransactionEnvelope,
        signer: TransactionSigner,
        requested_destination: Optional[str] = None,
    ) -> SubmissionResult:
        """Sign, broadcast and confirm a swap transaction.

        Raises:
            SigningError: Signer failed or was rejected (nothing broadcast)
            BroadcastError: Node rejected the transaction, or it failed/expired
            ConfirmationTimeoutError: Outcome unknown after the timeout window
        """
        if self.state is not SubmissionState.BUILT:
            raise RuntimeError(f"Coordinator already used (state: {self.state.value})")

        try:
            signed = await self._sign(envelope, signer)
            signature = await self._broadcast(signed)
            await self._confirm(signature, envelope.last_valid_block_height)
        except SolswapError:
            self._transition(SubmissionState.FAILED)
            raise

        self._transition(SubmissionState.CONFIRMED)
        logger.info(f"Swap confirmed: {signature}")
        return SubmissionResult(
            signature=signature,
            destination_overridden=requested_destination is not None,
        )

    async def _sign(self, envelope: TransactionEnvelope, signer: TransactionSigner) -> bytes:
        self._transition(SubmissionState.SIGNING)
        logger.info(f"Requesting signature for {envelope.kind.value} transaction")
        try:
            signed = await signer.sign_transaction(envelope.payload)
        except SigningError:
            logger.error("Signer rejected the transaction")
            raise
        except Exception as e:
            logger.error(f"Signer failed: {type(e).__name__}: {e}")
            raise SigningError(f"Signer failed: {e}") from e

        if not signed:
            raise SigningError("Signer returned no transaction")

        self._transition(SubmissionState.SIGNED)
        return bytes(signed)

    async def _broadcast(self, signed: bytes) -> str:
        self._transition(SubmissionState.BROADCASTING)
        try:
            signature = await self.rpc.send_raw_transaction(signed)
        except RpcError as e:
            logger.error(f"Broadcast rejected: {e}")
            raise BroadcastError(f"Transaction rejected by node: {e}") from e

        if not isinstance(signature, str) or not signature:
            raise BroadcastError("Node returned no transaction signature")

        self.signature = signature
        logger.info(f"Transaction sent, signature: {signature}")
        return signature

    async def _confirm(self, signature: str, last_valid_block_height: Optional[int]) -> None:
        self._transition(SubmissionState.AWAITING_CONFIRMATION)
        try:
            await self.rpc.confirm_transaction(
                signature,
                commitment=self.commitment,
                timeout=self.confirm_timeout,
                poll_interval=self.poll_interval,
                last_valid_block_height=last_valid_block_height,
            )
        except ConfirmationTimeoutError:
            logger.warning(
                f"Confirmation timed out for {signature}; outcome unknown, not resubmitting"
            )
            raise
