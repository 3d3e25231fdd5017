"""Swap submission: envelope decoding and the sign/broadcast/confirm pipeline."""

from solswap.swap.envelope import TransactionEnvelope, TransactionKind, decode_envelope
from solswap.swap.executor import SubmissionCoordinator, SubmissionResult, SubmissionState

__all__ = [
    "TransactionEnvelope",
    "TransactionKind",
    "decode_envelope",
    "SubmissionCoordinator",
    "SubmissionResult",
    "SubmissionState",
]
