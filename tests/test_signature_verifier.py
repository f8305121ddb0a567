# tests/test_signature_verifier.py
"""Tests for EIP-191 signature recovery."""

import pytest

from tests.conftest import sign_nonce
from wallet_auth.services.signature import (
    SignatureDecodeError,
    SignatureVerifier,
    decode_signature,
)

MESSAGE = "3f2b8c4e-1a7d-4b9e-8f60-2c5d9e7a1b34"


def test_verify_accepts_own_signature(wallet):
    signature = sign_nonce(wallet, MESSAGE)
    assert SignatureVerifier.verify(MESSAGE, signature, wallet.address)


def test_verify_ignores_address_case(wallet):
    signature = sign_nonce(wallet, MESSAGE)
    assert SignatureVerifier.verify(MESSAGE, signature, wallet.address.lower())
    assert SignatureVerifier.verify(MESSAGE, signature, "0x" + wallet.address[2:].upper())


def test_verify_accepts_signature_without_prefix(wallet):
    signature = sign_nonce(wallet, MESSAGE)[2:]
    assert SignatureVerifier.verify(MESSAGE, signature, wallet.address)


def test_recover_returns_canonical_identity(wallet, wallet_identity):
    assert SignatureVerifier.recover(MESSAGE, sign_nonce(wallet, MESSAGE)) == wallet_identity


def test_verify_rejects_other_signer(wallet, other_wallet):
    signature = sign_nonce(other_wallet, MESSAGE)
    assert not SignatureVerifier.verify(MESSAGE, signature, wallet.address)


def test_verify_rejects_other_message(wallet):
    signature = sign_nonce(wallet, MESSAGE)
    assert not SignatureVerifier.verify("another-nonce", signature, wallet.address)


def test_verify_rejects_malformed_claimed_address(wallet):
    signature = sign_nonce(wallet, MESSAGE)
    assert not SignatureVerifier.verify(MESSAGE, signature, "not-an-address")


@pytest.mark.parametrize(
    "signature",
    [
        "",
        "0x",
        "0xzz" + "00" * 64,
        "0x" + "ab" * 64,
        "0x" + "ab" * 66,
    ],
)
def test_verify_rejects_undecodable_signature(wallet, signature):
    assert not SignatureVerifier.verify(MESSAGE, signature, wallet.address)


def test_recover_rejects_invalid_recovery_id():
    # r and s are in range but v is neither 0/1 nor 27/28.
    signature = "0x" + "11" * 32 + "22" * 32 + "05"
    with pytest.raises(SignatureDecodeError):
        SignatureVerifier.recover(MESSAGE, signature)


def test_decode_signature_lengths():
    assert len(decode_signature("0x" + "ab" * 65)) == 65
    assert len(decode_signature("0X" + "AB" * 65)) == 65
    with pytest.raises(SignatureDecodeError):
        decode_signature("ab" * 10)
