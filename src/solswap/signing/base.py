"""Signer boundary for swap transactions.

Signing flow:
1. Aggregator returns an unsigned transaction (zeroed signature slots)
2. Signer receives the raw bytes
3. Signer returns the same transaction with its signature filled in
4. Signed bytes are broadcast verbatim

Key custody is the signer's concern; the pipeline never sees private keys.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Union

from solswap.exceptions import SigningError

logger = logging.getLogger(__name__)

SignCallback = Callable[[bytes], Union[bytes, None, Awaitable[Optional[bytes]]]]


class TransactionSigner(ABC):
    """Abstract base class for transaction signers."""

    @property
    @abstractmethod
    def public_key(self) -> Optional[str]:
        """Base58 public key of the signing wallet, if known."""
        pass

    @abstractmethod
    async def sign_transaction(self, payload: bytes) -> Optional[bytes]:
        """Sign serialized transaction bytes.

        Args:
            payload: Unsigned serialized transaction

        Returns:
            Signed serialized transaction

        Raises:
            SigningError: If signing fails or the user rejects it
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(public_key={self.public_key})"


class CallbackSigner(TransactionSigner):
    """Adapts a wallet's sign callback (sync or async) to TransactionSigner."""

    def __init__(self, sign: SignCallback, public_key: Optional[str] = None):
        self._sign = sign
        self._public_key = public_key

    @property
    def public_key(self) -> Optional[str]:
        return self._public_key

    async def sign_transaction(self, payload: bytes) -> Optional[bytes]:
        result = self._sign(payload)
        if inspect.isawaitable(result):
            result = await result
        return result


class UserRejectedError(SigningError):
    """Raised when the wallet owner declines to sign."""

    pass
