"""Authentication endpoints for the wallet auth API."""

from __future__ import annotations

from fastapi import APIRouter, status

from wallet_auth.api.v1.dependencies import AuthFlowDep
from wallet_auth.schemas.auth import AuthRequest, AuthResponse

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "",
    summary="Exchange a wallet-signed nonce for a session token",
    status_code=status.HTTP_200_OK,
    response_model=AuthResponse,
    response_model_exclude_none=True,
)
def web3_auth(payload: AuthRequest, auth_flow: AuthFlowDep) -> AuthResponse:
    """Verify the signature over the pending nonce and return a JWT."""
    outcome = auth_flow.authenticate(payload.address, payload.signature)
    return AuthResponse(
        jwt=outcome.token,
        expires_at=outcome.claims.expires_at,
        jwk=outcome.jwk,
    )
