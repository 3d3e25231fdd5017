"""Per-wallet swap serialization.

At most one swap submission may be in flight per wallet identity. Two
concurrent submissions from the same wallet race for the same funds, and
the loser's rejection is hard to attribute to a request.
"""

import asyncio
import logging
from typing import Optional

from solswap.exceptions import SwapInProgressError

logger = logging.getLogger(__name__)

# Global lock registry: wallet address -> asyncio.Lock
_wallet_locks: dict[str, asyncio.Lock] = {}


def get_wallet_lock(address: str) -> asyncio.Lock:
    """Get or create the swap lock for a wallet."""
    lock = _wallet_locks.get(address)
    if lock is None:
        lock = _wallet_locks[address] = asyncio.Lock()
    return lock


def is_swap_in_flight(address: str) -> bool:
    lock = _wallet_locks.get(address)
    return lock is not None and lock.locked()


class WalletSwapLock:
    """Context manager holding a wallet's swap slot.

    Fails fast instead of queueing: a queued swap would execute against a
    quote that aged while it waited.

    Example:
        async with WalletSwapLock(address):
            quote = await jupiter.get_quote(...)
            ...
    """

    def __init__(self, address: str, operation: str = "swap"):
        self.address = address
        self.operation = operation
        self._lock: Optional[asyncio.Lock] = None

    async def __aenter__(self) -> "WalletSwapLock":
        # Lookup, check and acquire run without a suspension point on the event loop
        lock = get_wallet_lock(self.address)
        if lock.locked():
            logger.warning(f"Rejected {self.operation} for {self.address}: swap already in flight")
            raise SwapInProgressError(f"A swap is already in progress for {self.address}")
        await lock.acquire()
        self._lock = lock
        logger.debug(f"Swap lock acquired for {self.address}: {self.operation}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._lock is not None:
            self._lock.release()
            # Drop idle entries
            if not self._lock.locked() and _wallet_locks.get(self.address) is self._lock:
                del _wallet_locks[self.address]
            self._lock = None
            logger.debug(f"Swap lock released for {self.address}: {self.operation}")
        return False


def clear_wallet_locks() -> None:
    """Clear all wallet locks (useful for testing)."""
    _wallet_locks.clear()
