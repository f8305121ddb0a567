"""Authentication request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from wallet_auth.services.identity import to_identity
from wallet_auth.services.signature import decode_signature


class NonceResponse(BaseModel):
    """Nonce the client must sign with its wallet."""

    address: str = Field(..., description="Canonical lowercase account address")
    nonce: str = Field(..., description="Single-use challenge to sign verbatim")


class AuthRequest(BaseModel):
    """Signed challenge submitted to obtain a session token."""

    address: str = Field(..., description="0x-prefixed account address")
    signature: str = Field(..., description="Hex encoded 65-byte personal_sign signature")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Canonicalise the address to lowercase hex."""
        return to_identity(v)

    @field_validator("signature")
    @classmethod
    def validate_signature(cls, v: str) -> str:
        decode_signature(v)
        return v.strip()


class AuthResponse(BaseModel):
    """Session token returned after successful authentication."""

    jwt: str = Field(..., description="Signed session token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="Token expiry (UTC)")
    jwk: dict[str, str] | None = Field(
        default=None,
        description="Public verification key, present for asymmetric algorithms",
    )


class JwksResponse(BaseModel):
    keys: list[dict[str, str]]
