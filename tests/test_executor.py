"""Tests for the submission coordinator."""

import base64
import json
from unittest.mock import AsyncMock

import pytest

from solswap.exceptions import (
    BroadcastError,
    ConfirmationTimeoutError,
    SigningError,
    TransactionFailedError,
)
from solswap.signing import CallbackSigner, UserRejectedError
from solswap.swap.envelope import TransactionEnvelope, TransactionKind
from solswap.swap.executor import SubmissionCoordinator, SubmissionState

from conftest import THIRD_PARTY, make_rpc, rpc_error, rpc_method, rpc_result

ENVELOPE = TransactionEnvelope(kind=TransactionKind.VERSIONED, payload=b"\x01unsigned")


class RecordingNode:
    """Fake RPC node that records methods and confirms after one poll."""

    def __init__(self, send=None, status=None):
        self.methods = []
        self.sent = []
        self.send = send
        self.status = status if status is not None else {"confirmationStatus": "confirmed", "err": None}

    def __call__(self, request):
        method = rpc_method(request)
        self.methods.append(method)
        if method == "sendTransaction":
            if self.send is not None:
                return self.send(request)
            self.sent.append(request)
            return rpc_result(request, "5wHuSig")
        if method == "getSignatureStatuses":
            return rpc_result(request, {"value": [self.status]})
        return rpc_result(request, 0)


def _coordinator(node, **kwargs) -> SubmissionCoordinator:
    kwargs.setdefault("poll_interval", 0.001)
    return SubmissionCoordinator(make_rpc(node), **kwargs)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success(self):
        node = RecordingNode()
        signer = CallbackSigner(lambda payload: payload + b"signed")
        coordinator = _coordinator(node)

        result = await coordinator.submit(ENVELOPE, signer)

        assert result.signature == "5wHuSig"
        assert result.destination_overridden is False
        assert coordinator.state == SubmissionState.CONFIRMED
        assert node.methods == ["sendTransaction", "getSignatureStatuses"]

    @pytest.mark.asyncio
    async def test_destination_overridden(self):
        coordinator = _coordinator(RecordingNode())
        signer = CallbackSigner(lambda payload: payload)

        result = await coordinator.submit(ENVELOPE, signer, requested_destination=THIRD_PARTY)

        assert result.destination_overridden is True

    @pytest.mark.asyncio
    async def test_signed_bytes_sent_verbatim(self):
        node = RecordingNode()
        await _coordinator(node).submit(ENVELOPE, CallbackSigner(lambda p: b"\x01exact-bytes"))

        params = json.loads(node.sent[0].content)["params"]
        assert base64.b64decode(params[0]) == b"\x01exact-bytes"

    @pytest.mark.asyncio
    async def test_signer_rejection_never_broadcasts(self):
        node = RecordingNode()
        signer = AsyncMock()
        signer.sign_transaction.side_effect = UserRejectedError("User rejected the request")
        coordinator = _coordinator(node)

        with pytest.raises(SigningError, match="User rejected"):
            await coordinator.submit(ENVELOPE, signer)

        assert node.methods == []
        assert coordinator.state == SubmissionState.FAILED

    @pytest.mark.asyncio
    async def test_signer_exception_wrapped(self):
        node = RecordingNode()

        def explode(payload):
            raise RuntimeError("wallet disconnected")

        with pytest.raises(SigningError, match="wallet disconnected"):
            await _coordinator(node).submit(ENVELOPE, CallbackSigner(explode))

        assert node.methods == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("returned", [None, b""])
    async def test_signer_returns_nothing(self, returned):
        node = RecordingNode()

        with pytest.raises(SigningError, match="no transaction"):
            await _coordinator(node).submit(ENVELOPE, CallbackSigner(lambda p: returned))

        assert node.methods == []

    @pytest.mark.asyncio
    async def test_broadcast_rejected(self):
        node = RecordingNode(
            send=lambda request: rpc_error(request, "Blockhash not found", code=-32002)
        )
        coordinator = _coordinator(node)

        with pytest.raises(BroadcastError, match="Blockhash not found"):
            await coordinator.submit(ENVELOPE, CallbackSigner(lambda p: p))

        assert node.methods == ["sendTransaction"]
        assert coordinator.state == SubmissionState.FAILED

    @pytest.mark.asyncio
    async def test_onchain_failure_is_broadcast_error(self):
        node = RecordingNode(status={"confirmationStatus": "confirmed", "err": {"InstructionError": [2, {"Custom": 6001}]}})

        with pytest.raises(TransactionFailedError) as exc_info:
            await _coordinator(node).submit(ENVELOPE, CallbackSigner(lambda p: p))

        assert isinstance(exc_info.value, BroadcastError)
        assert exc_info.value.signature == "5wHuSig"

    @pytest.mark.asyncio
    async def test_confirmation_timeout_is_not_broadcast_error(self):
        node = RecordingNode(status={"confirmationStatus": "processed", "err": None})
        coordinator = _coordinator(node, confirm_timeout=0.05, poll_interval=0.01)

        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await coordinator.submit(ENVELOPE, CallbackSigner(lambda p: p))

        assert not isinstance(exc_info.value, BroadcastError)
        assert exc_info.value.signature == "5wHuSig"
        # Exactly one submission, no automatic resend
        assert node.methods.count("sendTransaction") == 1
        assert coordinator.state == SubmissionState.FAILED

    @pytest.mark.asyncio
    async def test_coordinator_single_use(self):
        coordinator = _coordinator(RecordingNode())
        await coordinator.submit(ENVELOPE, CallbackSigner(lambda p: p))

        with pytest.raises(RuntimeError):
            await coordinator.submit(ENVELOPE, CallbackSigner(lambda p: p))
