"""Session token minting and validation.

Tokens are JWTs carrying ``sub`` (the canonical account identity), ``iat`` and
``exp``. The signing algorithm is fixed at startup: an HMAC secret for the
``HS*`` family or an Ed25519 key pair for ``EdDSA``. Tokens announcing any other
algorithm are rejected.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from jose import jwt
from jose.exceptions import JWTClaimsError, JWTError

from wallet_auth.core.errors import (
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureInvalidError,
)
from wallet_auth.core.jwk import EDDSA, Ed25519Key
from wallet_auth.core.pkcs8 import load_ed25519_pkcs8
from wallet_auth.core.settings import Settings
from wallet_auth.db.time import utcnow
from wallet_auth.services.identity import is_identity

logger = logging.getLogger(__name__)

HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})
DEFAULT_TOKEN_TTL = timedelta(hours=1)


class KeyMaterialError(ValueError):
    """Signing key configuration is missing or unusable."""


@dataclass(frozen=True)
class Claims:
    """Decoded session token payload."""

    subject: str
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "sub": self.subject,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }


@dataclass(frozen=True)
class Token:
    """An encoded session token together with the claims it carries."""

    value: str
    claims: Claims

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SigningKeyMaterial:
    """Keys used to sign and verify session tokens."""

    algorithm: str
    signing_key: Any = field(repr=False)
    verification_key: Any = field(repr=False)
    public_jwk: dict[str, str] | None = None

    @property
    def is_asymmetric(self) -> bool:
        return self.public_jwk is not None


def load_private_key(encoded: str) -> Ed25519PrivateKey:
    """Load an Ed25519 private key from PEM or base64 PKCS#8 (v1 or v2) DER."""
    data = encoded.strip()
    try:
        if data.startswith("-----BEGIN"):
            key = serialization.load_pem_private_key(data.encode(), password=None)
        else:
            der = base64.b64decode(data)
            try:
                key = serialization.load_der_private_key(der, password=None)
            except ValueError:
                # Key pair documents with an embedded public key.
                key = load_ed25519_pkcs8(der)
    except ValueError as err:
        raise KeyMaterialError(f"Failed to load Ed25519 key pair: {err}") from err
    if not isinstance(key, Ed25519PrivateKey):
        raise KeyMaterialError("JWT_PRIVATE_KEY must be an Ed25519 private key")
    return key


def ed25519_key_material(
    private_key: Ed25519PrivateKey,
    key_id: str | None = None,
) -> SigningKeyMaterial:
    signing_key = Ed25519Key(private_key, EDDSA)
    verification_key = signing_key.public_key()
    public_jwk = verification_key.to_dict()
    public_jwk["use"] = "sig"
    if key_id:
        public_jwk["kid"] = key_id
    return SigningKeyMaterial(
        algorithm=EDDSA,
        signing_key=signing_key,
        verification_key=verification_key,
        public_jwk=public_jwk,
    )


def hmac_key_material(secret: str, algorithm: str = "HS256") -> SigningKeyMaterial:
    if algorithm not in HMAC_ALGORITHMS:
        raise KeyMaterialError(f"{algorithm} is not an HMAC algorithm")
    if not secret:
        raise KeyMaterialError("SECRET_KEY must not be empty")
    return SigningKeyMaterial(algorithm=algorithm, signing_key=secret, verification_key=secret)


def load_key_material(settings: Settings) -> SigningKeyMaterial:
    """Build the process-wide key material from configuration."""
    if settings.jwt_algorithm == EDDSA:
        if not settings.jwt_private_key:
            raise KeyMaterialError("JWT_PRIVATE_KEY is required when JWT_ALGORITHM is EdDSA")
        private_key = load_private_key(settings.jwt_private_key)
        return ed25519_key_material(private_key, settings.jwt_key_id)
    return hmac_key_material(settings.secret_key, settings.jwt_algorithm)


class TokenService:
    """Mints and validates session tokens with a fixed algorithm and key."""

    def __init__(
        self,
        key_material: SigningKeyMaterial,
        *,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._keys = key_material
        self._ttl = ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            load_key_material(settings),
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
        )

    @property
    def algorithm(self) -> str:
        return self._keys.algorithm

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def public_jwk(self) -> dict[str, str] | None:
        """Public verification key as a JWK, or None for HMAC secrets."""
        if self._keys.public_jwk is None:
            return None
        return dict(self._keys.public_jwk)

    def jwks(self) -> dict[str, list[dict[str, str]]]:
        """Return the publishable JWK set."""
        jwk = self.public_jwk
        return {"keys": [jwk] if jwk else []}

    def mint(self, identity: str) -> Token:
        """Create a signed token for ``identity`` valid for the configured TTL."""
        now = self._clock().replace(microsecond=0)
        claims = Claims(subject=identity, issued_at=now, expires_at=now + self._ttl)
        key_id = (self._keys.public_jwk or {}).get("kid")
        headers = {"kid": key_id} if key_id else None
        value: str = jwt.encode(
            claims.to_payload(),
            self._keys.signing_key,
            algorithm=self._keys.algorithm,
            headers=headers,
        )
        return Token(value=value, claims=claims)

    def validate(self, token: str) -> Claims:
        """Verify ``token`` and return its claims.

        Raises:
            TokenMalformedError: If the token cannot be decoded or lacks claims.
            TokenSignatureInvalidError: If the signature or algorithm is wrong.
            TokenExpiredError: If the token is authentic but past its expiry.
        """
        try:
            header = jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as err:
            raise TokenMalformedError() from err

        if header.get("alg") != self._keys.algorithm:
            logger.info("Rejected token signed with %s", header.get("alg"))
            raise TokenSignatureInvalidError()

        try:
            payload = jwt.decode(
                token,
                self._keys.verification_key,
                algorithms=[self._keys.algorithm],
                # Expiry is checked below against the injected clock.
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTClaimsError as err:
            raise TokenMalformedError() from err
        except JWTError as err:
            raise TokenSignatureInvalidError() from err

        claims = self._claims_from_payload(payload)
        if self._clock() > claims.expires_at:
            raise TokenExpiredError()
        return claims

    @staticmethod
    def _claims_from_payload(payload: dict[str, Any]) -> Claims:
        subject = payload.get("sub")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if not isinstance(subject, str) or not is_identity(subject):
            raise TokenMalformedError("Auth token subject is not an account address")
        if not isinstance(issued_at, int) or not isinstance(expires_at, int):
            raise TokenMalformedError("Auth token is missing iat/exp claims")
        return Claims(
            subject=subject,
            issued_at=datetime.fromtimestamp(issued_at, tz=UTC),
            expires_at=datetime.fromtimestamp(expires_at, tz=UTC),
        )
