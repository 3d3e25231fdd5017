"""Pytest configuration and fixtures."""

import base64
import json
import os

import base58
import httpx
import pytest
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import Message, MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

# Set test environment
os.environ["DEBUG"] = "true"

from solswap.config import get_settings
from solswap.routing.jupiter import JupiterClient
from solswap.rpc import SolanaRpcClient
from solswap.signing.local import LocalKeypairSigner
from solswap.utils.locks import clear_wallet_locks

JUPITER_URL = "https://jupiter.test/v6"
RPC_URL = "https://rpc.test"

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
WSOL_MINT = "So11111111111111111111111111111111111111112"

REQUESTER = base58.b58encode(bytes(range(1, 33))).decode()
THIRD_PARTY = base58.b58encode(bytes(range(101, 133))).decode()

MEMO_PROGRAM_ID = Pubkey.from_string("MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr")


def quote_body(in_amount: int = 10_000_000, out_amount: int = 50_000_000) -> dict:
    """A /quote response as Jupiter returns it."""
    return {
        "inputMint": USDC_MINT,
        "inAmount": str(in_amount),
        "outputMint": WSOL_MINT,
        "outAmount": str(out_amount),
        "otherAmountThreshold": str(out_amount * 995 // 1000),
        "swapMode": "ExactIn",
        "slippageBps": 50,
        "priceImpactPct": "0.0001",
        "routePlan": [
            {"swapInfo": {"ammKey": "amm1", "label": "Orca", "inputMint": USDC_MINT}, "percent": 100}
        ],
    }


def build_unsigned_transaction(signers: list[Pubkey], versioned: bool = True) -> bytes:
    """Serialize an unsigned memo transaction requiring a signature from each of `signers`."""
    instruction = Instruction(
        MEMO_PROGRAM_ID,
        b"swap",
        [AccountMeta(signer, is_signer=True, is_writable=True) for signer in signers],
    )
    if versioned:
        message = MessageV0.try_compile(signers[0], [instruction], [], Hash.default())
    else:
        message = Message.new_with_blockhash([instruction], signers[0], Hash.default())
    slots = [Signature.default()] * message.header.num_required_signatures
    return bytes(VersionedTransaction.populate(message, slots))


def rpc_result(request: httpx.Request, result) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


def rpc_error(request: httpx.Request, message: str, code: int = -32002) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(
        200,
        json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": code, "message": message}},
    )


def rpc_method(request: httpx.Request) -> str:
    return json.loads(request.content)["method"]


def rpc_params(request: httpx.Request) -> list:
    return json.loads(request.content)["params"]


def make_jupiter(handler, **kwargs) -> JupiterClient:
    return JupiterClient(base_url=JUPITER_URL, transport=httpx.MockTransport(handler), **kwargs)


def make_rpc(handler) -> SolanaRpcClient:
    return SolanaRpcClient(RPC_URL, transport=httpx.MockTransport(handler))


def encode_tx(raw: bytes) -> str:
    return base64.b64encode(raw).decode()


@pytest.fixture(autouse=True)
def reset_state():
    """Clear cached settings and wallet locks before each test."""
    get_settings.cache_clear()
    clear_wallet_locks()
    yield
    get_settings.cache_clear()


@pytest.fixture
def local_signer() -> LocalKeypairSigner:
    return LocalKeypairSigner.generate()
