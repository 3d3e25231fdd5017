"""Local signing backend.

Uses an in-memory ed25519 keypair for signing. Suitable for:
- Development/testing
- Scripted swaps from a hot wallet with small amounts

WARNING: The secret key is held in memory. Use a wallet signer for
significant funds.
"""

import json
import logging
from typing import Optional, Union

import base58
from solders.errors import BincodeError
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.transaction import Transaction, VersionedTransaction

from solswap.exceptions import SigningError
from solswap.signing.base import TransactionSigner

logger = logging.getLogger(__name__)


class KeyNotFoundError(SigningError):
    """Raised when the transaction does not require this keypair's signature."""

    pass


def load_secret_key(secret: str) -> bytes:
    """Parse a 64-byte secret key.

    Accepts a base58 string (wallet export format) or a JSON array of
    integers (solana-keygen file format).
    """
    secret = secret.strip()
    try:
        if secret.startswith("["):
            raw = bytes(json.loads(secret))
        else:
            raw = base58.b58decode(secret)
    except (TypeError, ValueError) as e:
        raise SigningError(f"Invalid secret key encoding: {e}") from e

    if len(raw) != 64:
        raise SigningError(f"Secret key must be 64 bytes, got {len(raw)}")
    return raw


def _decode_transaction(
    payload: bytes,
) -> tuple[Union[Transaction, VersionedTransaction], bytes]:
    """Deserialize a transaction and return it with the message bytes to sign."""
    tx = VersionedTransaction.from_bytes(payload)
    if isinstance(tx.message, MessageV0):
        return tx, to_bytes_versioned(tx.message)
    legacy = Transaction.from_bytes(payload)
    return legacy, bytes(legacy.message)


class LocalKeypairSigner(TransactionSigner):
    """Signs swap transactions with a local Solana keypair."""

    def __init__(self, secret_key: bytes):
        if len(secret_key) not in (32, 64):
            raise SigningError("Secret key must be 32 or 64 bytes")
        self._keypair = Keypair.from_seed(bytes(secret_key[:32]))

        if len(secret_key) == 64 and bytes(self._keypair.pubkey()) != secret_key[32:]:
            raise SigningError("Secret key does not match its embedded public key")

    @classmethod
    def from_secret(cls, secret: str) -> "LocalKeypairSigner":
        return cls(load_secret_key(secret))

    @classmethod
    def generate(cls) -> "LocalKeypairSigner":
        """Create a signer with a fresh random keypair (for testing)."""
        return cls(bytes(Keypair()))

    @property
    def public_key(self) -> Optional[str]:
        return str(self._keypair.pubkey())

    async def sign_transaction(self, payload: bytes) -> Optional[bytes]:
        """Sign the message and write the signature into this key's slot."""
        try:
            tx, message = _decode_transaction(payload)
        except (BincodeError, ValueError) as e:
            raise SigningError(f"Malformed transaction: {e}") from e

        num_required = tx.message.header.num_required_signatures
        signers = list(tx.message.account_keys[:num_required])
        try:
            slot = signers.index(self._keypair.pubkey())
        except ValueError:
            raise KeyNotFoundError(
                f"Transaction does not require a signature from {self.public_key}"
            ) from None

        signatures = list(tx.signatures)
        if slot >= len(signatures):
            raise SigningError("Transaction has no signature slot for this signer")
        signatures[slot] = self._keypair.sign_message(message)

        logger.info(f"Transaction signed by {self.public_key} (slot {slot})")
        return bytes(type(tx).populate(tx.message, signatures))
