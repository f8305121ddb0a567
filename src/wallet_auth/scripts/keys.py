"""Generate signing keys for the ``JWT_PRIVATE_KEY`` setting.

Usage:
    python -m wallet_auth.scripts.keys            # base64 PKCS#8 DER
    python -m wallet_auth.scripts.keys --pem      # PEM
"""

from __future__ import annotations

import argparse
import base64
import json

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from wallet_auth.services.tokens import ed25519_key_material, load_private_key


def generate_private_key(*, pem: bool = False) -> str:
    """Return a new Ed25519 private key encoded for configuration."""
    private_key = Ed25519PrivateKey.generate()
    if pem:
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode()
    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return base64.b64encode(der).decode()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate an Ed25519 JWT signing key")
    parser.add_argument("--pem", action="store_true", help="Emit PEM instead of base64 DER")
    parser.add_argument("--kid", default=None, help="Key id to include in the printed JWK")
    args = parser.parse_args(argv)

    encoded = generate_private_key(pem=args.pem)
    print(encoded if args.pem else f"JWT_PRIVATE_KEY={encoded}")

    material = ed25519_key_material(load_private_key(encoded), args.kid)
    print(json.dumps(material.public_jwk, indent=2))


if __name__ == "__main__":
    main()
