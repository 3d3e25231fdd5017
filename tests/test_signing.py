"""Tests for the signer implementations."""

import json

import base58
import pytest
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from solswap.exceptions import SigningError
from solswap.signing import CallbackSigner, LocalKeypairSigner, load_secret_key
from solswap.signing.local import KeyNotFoundError

from conftest import build_unsigned_transaction


def _secret() -> tuple[bytes, Keypair]:
    keypair = Keypair()
    return bytes(keypair), keypair


class TestLoadSecretKey:
    def test_base58(self):
        raw, _ = _secret()
        assert load_secret_key(base58.b58encode(raw).decode()) == raw

    def test_json_array(self):
        raw, _ = _secret()
        assert load_secret_key(json.dumps(list(raw))) == raw

    @pytest.mark.parametrize("secret", ["[1, 2, 3]", "not-base58-0OIl", "[999]"])
    def test_invalid(self, secret):
        with pytest.raises(SigningError):
            load_secret_key(secret)

    def test_mismatched_public_half(self):
        raw, _ = _secret()
        with pytest.raises(SigningError, match="does not match"):
            LocalKeypairSigner(raw[:32] + bytes(32))

    def test_from_secret_round_trips_public_key(self):
        raw, keypair = _secret()
        signer = LocalKeypairSigner.from_secret(base58.b58encode(raw).decode())
        assert signer.public_key == str(keypair.pubkey())


class TestLocalKeypairSigner:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("versioned", [True, False])
    async def test_signs_message(self, versioned):
        raw, keypair = _secret()
        signer = LocalKeypairSigner(raw)
        unsigned = build_unsigned_transaction([keypair.pubkey()], versioned=versioned)

        signed = await signer.sign_transaction(unsigned)

        tx = VersionedTransaction.from_bytes(signed)
        before = VersionedTransaction.from_bytes(unsigned)
        assert tx.message == before.message
        assert len(signed) == len(unsigned)
        assert tx.signatures[0].verify(keypair.pubkey(), to_bytes_versioned(tx.message))

    @pytest.mark.asyncio
    async def test_signs_second_slot(self):
        raw, keypair = _secret()
        other = Keypair().pubkey()
        signer = LocalKeypairSigner(raw)
        unsigned = build_unsigned_transaction([other, keypair.pubkey()])

        signed = await signer.sign_transaction(unsigned)

        signatures = VersionedTransaction.from_bytes(signed).signatures
        assert signatures[0] == Signature.default()
        assert signatures[1] != Signature.default()

    @pytest.mark.asyncio
    async def test_not_a_required_signer(self, local_signer):
        unsigned = build_unsigned_transaction([Pubkey(bytes([5]) * 32)])

        with pytest.raises(KeyNotFoundError):
            await local_signer.sign_transaction(unsigned)

    @pytest.mark.asyncio
    async def test_malformed_transaction(self, local_signer):
        with pytest.raises(SigningError, match="Malformed"):
            await local_signer.sign_transaction(b"\x01\x00")

    def test_public_key_is_base58(self, local_signer):
        assert len(base58.b58decode(local_signer.public_key)) == 32


class TestCallbackSigner:
    @pytest.mark.asyncio
    async def test_sync_callback(self):
        signer = CallbackSigner(lambda payload: payload + b"!")
        assert await signer.sign_transaction(b"tx") == b"tx!"

    @pytest.mark.asyncio
    async def test_async_callback(self):
        async def sign(payload: bytes) -> bytes:
            return payload[::-1]

        signer = CallbackSigner(sign, public_key="abc")
        assert await signer.sign_transaction(b"ab") == b"ba"
        assert signer.public_key == "abc"
