"""Signature verification for wallet-signed challenges.

Clients sign the nonce with ``personal_sign`` (EIP-191). The signer's address
is recovered from the signature and compared with the claimed identity.
"""

from __future__ import annotations

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError

from wallet_auth.services.identity import to_identity

SIGNATURE_BYTES = 65


class SignatureDecodeError(ValueError):
    """The signature is not a recoverable secp256k1 signature."""


def decode_signature(signature: str) -> bytes:
    """Decode a hex signature (``0x`` prefix optional) into 65 raw bytes."""
    cleaned = signature.strip()
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    try:
        raw = bytes.fromhex(cleaned)
    except ValueError as err:
        raise SignatureDecodeError(f"Invalid hex encoding: {err}") from err
    if len(raw) != SIGNATURE_BYTES:
        raise SignatureDecodeError(f"Signatures must be {SIGNATURE_BYTES} bytes")
    return raw


class SignatureVerifier:
    """Recovers and checks the account behind a signed message."""

    @staticmethod
    def recover(message: str, signature: str) -> str:
        """Return the canonical identity that signed ``message``.

        Raises:
            SignatureDecodeError: If the signature cannot be decoded or recovered.
        """
        raw = decode_signature(signature)
        try:
            address = Account.recover_message(encode_defunct(text=message), signature=raw)
        except (BadSignature, KeyValidationError, ValueError, TypeError) as err:
            raise SignatureDecodeError(f"Unrecoverable signature: {err}") from err
        return to_identity(address)

    @classmethod
    def verify(cls, message: str, signature: str, claimed_identity: str) -> bool:
        """Return True if ``signature`` over ``message`` came from ``claimed_identity``."""
        try:
            recovered = cls.recover(message, signature)
            expected = to_identity(claimed_identity)
        except ValueError:
            return False
        return recovered == expected
