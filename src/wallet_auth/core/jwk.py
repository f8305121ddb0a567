"""Ed25519 (EdDSA) support for python-jose.

python-jose ships HMAC, RSA and EC keys only. This module provides a
``jose.backends.base.Key`` implementation backed by ``cryptography`` and
registers it for the ``EdDSA`` algorithm so ``jose.jwt`` can sign and verify
Ed25519 tokens (RFC 8037).
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from jose import jwk
from jose.backends.base import Key
from jose.exceptions import JWKError

EDDSA = "EdDSA"
ED25519_KEY_BYTES = 32


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def raw_public_bytes(key: Ed25519PublicKey) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


class Ed25519Key(Key):
    """JOSE key wrapping an Ed25519 private or public key."""

    def __init__(self, key: Any, algorithm: str) -> None:
        if algorithm != EDDSA:
            raise JWKError(f"Ed25519 keys only support the {EDDSA} algorithm, not {algorithm}")
        self._algorithm = algorithm

        if isinstance(key, Mapping):
            key = self._from_jwk(key)

        if not isinstance(key, (Ed25519PrivateKey, Ed25519PublicKey)):
            raise JWKError("Unable to construct an Ed25519 key from %s" % type(key).__name__)
        self.prepared_key = key

    @staticmethod
    def _from_jwk(data: Mapping[str, Any]) -> Ed25519PrivateKey | Ed25519PublicKey:
        if data.get("kty") != "OKP" or data.get("crv") != "Ed25519":
            raise JWKError("Not an Ed25519 OKP key")
        try:
            if "d" in data:
                return Ed25519PrivateKey.from_private_bytes(b64url_decode(data["d"]))
            return Ed25519PublicKey.from_public_bytes(b64url_decode(data["x"]))
        except (KeyError, ValueError) as err:
            raise JWKError(f"Invalid Ed25519 JWK: {err}") from err

    def is_public(self) -> bool:
        return isinstance(self.prepared_key, Ed25519PublicKey)

    def _verification_key(self) -> Ed25519PublicKey:
        if isinstance(self.prepared_key, Ed25519PrivateKey):
            return self.prepared_key.public_key()
        return self.prepared_key

    def sign(self, msg: bytes) -> bytes:
        if not isinstance(self.prepared_key, Ed25519PrivateKey):
            raise JWKError("A private key is required to sign")
        return self.prepared_key.sign(msg)

    def verify(self, msg: bytes, sig: bytes) -> bool:
        try:
            self._verification_key().verify(sig, msg)
        except InvalidSignature:
            return False
        return True

    def public_key(self) -> Ed25519Key:
        return Ed25519Key(self._verification_key(), self._algorithm)

    def to_dict(self) -> dict[str, str]:
        data = {
            "kty": "OKP",
            "crv": "Ed25519",
            "alg": self._algorithm,
            "x": b64url_encode(raw_public_bytes(self._verification_key())),
        }
        if isinstance(self.prepared_key, Ed25519PrivateKey):
            data["d"] = b64url_encode(
                self.prepared_key.private_bytes(
                    encoding=serialization.Encoding.Raw,
                    format=serialization.PrivateFormat.Raw,
                    encryption_algorithm=serialization.NoEncryption(),
                )
            )
        return data


jwk.register_key(EDDSA, Ed25519Key)
