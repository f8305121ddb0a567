"""Publication of the token verification key."""

from __future__ import annotations

from fastapi import APIRouter

from wallet_auth.api.v1.dependencies import TokenServiceDep
from wallet_auth.schemas.auth import JwksResponse

router = APIRouter(tags=["keys"])


@router.get("/.well-known/jwks.json", response_model=JwksResponse)
async def get_jwks(token_service: TokenServiceDep) -> JwksResponse:
    """Return the JWK set third parties use to verify session tokens.

    Empty when tokens are signed with a shared HMAC secret.
    """
    return JwksResponse(**token_service.jwks())
