"""Decoded, not-yet-signed swap transactions.

The envelope keeps the aggregator's bytes untouched. Parsing the
transaction itself is left to the signer.
"""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from solswap.exceptions import BuildError


class TransactionKind(str, Enum):
    """Transaction format, as read from the first payload byte."""

    LEGACY = "legacy"
    VERSIONED = "versioned"


@dataclass(frozen=True)
class TransactionEnvelope:
    """A swap transaction ready to hand to the signer."""

    kind: TransactionKind
    payload: bytes
    last_valid_block_height: Optional[int] = None


def classify(payload: bytes) -> TransactionKind:
    """First byte 0 means legacy; anything else means versioned."""
    if not payload:
        raise BuildError("Empty transaction payload")
    return TransactionKind.LEGACY if payload[0] == 0 else TransactionKind.VERSIONED


def decode_envelope(
    swap_transaction: str, last_valid_block_height: Optional[int] = None
) -> TransactionEnvelope:
    """Decode the aggregator's base64 transaction into a tagged envelope.

    Raises:
        BuildError: If the payload is not valid base64 or is empty
    """
    try:
        payload = base64.b64decode(swap_transaction, validate=True)
    except (binascii.Error, ValueError) as e:
        raise BuildError(f"Undecodable swap transaction: {e}") from e

    return TransactionEnvelope(
        kind=classify(payload),
        payload=payload,
        last_valid_block_height=last_valid_block_height,
    )

