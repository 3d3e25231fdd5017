"""Transaction signing.

Provides:
- TransactionSigner: Interface the submission pipeline signs through
- CallbackSigner: Wraps an external wallet's sign callback
- LocalKeypairSigner: In-memory ed25519 keypair (development/hot wallet)
"""

from solswap.signing.base import CallbackSigner, TransactionSigner, UserRejectedError
from solswap.signing.local import LocalKeypairSigner, load_secret_key

__all__ = [
    "TransactionSigner",
    "CallbackSigner",
    "UserRejectedError",
    "LocalKeypairSigner",
    "load_secret_key",
]
