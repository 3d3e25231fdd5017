"""Error taxonomy for the swap pipeline and balance queries.

Each pipeline stage raises its own error type so callers can tell a failed
swap apart from one whose outcome is unknown.
"""

from typing import Any, Optional


class SolswapError(Exception):
    """Base class for all solswap errors."""

    pass


class QuoteError(SolswapError):
    """Raised when the aggregator cannot produce a usable quote."""

    pass


class BuildError(SolswapError):
    """Raised when the swap transaction cannot be built or decoded."""

    pass


class SigningError(SolswapError):
    """Raised when the signer fails or the user rejects the request.

    Terminal: nothing has been sent to the network.
    """

    pass


class BroadcastError(SolswapError):
    """Raised when the node rejects the signed transaction."""

    pass


class TransactionFailedError(BroadcastError):
    """
    Raised when the transaction landed on-chain but its execution failed.
    Fees were paid; the swap did not happen.
    """

    def __init__(self, signature: str, err: Any):
        super().__init__(f"Transaction {signature} failed on-chain: {err}")
        self.signature = signature
        self.err = err


class BlockhashExpiredError(BroadcastError):
    """
    Raised when the chain moved past the transaction's last valid block
    height without the signature landing. The transaction can no longer land.
    """

    def __init__(self, signature: str, last_valid_block_height: int):
        super().__init__(
            f"Transaction {signature} expired at block height {last_valid_block_height}"
        )
        self.signature = signature
        self.last_valid_block_height = last_valid_block_height


class ConfirmationTimeoutError(SolswapError):
    """
    Raised when confirmation did not arrive within the timeout window.
    The transaction may still land: the outcome is UNKNOWN, not failed.
    Do not resubmit the same signed bytes.
    """

    def __init__(self, signature: str, timeout: float):
        super().__init__(
            f"Transaction {signature} not confirmed after {timeout}s (outcome unknown)"
        )
        self.signature = signature
        self.timeout = timeout


class BalanceQueryError(SolswapError):
    """Raised (or carried on a snapshot) when a balance query fails.

    Attributes:
        status: BalanceStatus of the snapshot this error belongs to
        cause: The underlying exception
    """

    def __init__(self, message: str, status: Any = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.status = status
        self.cause = cause


class RpcError(SolswapError):
    """Raised by the RPC client on transport failure or a JSON-RPC error."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class SwapInProgressError(SolswapError):
    """Raised when a swap is requested while another is in flight for the same wallet."""

    pass
