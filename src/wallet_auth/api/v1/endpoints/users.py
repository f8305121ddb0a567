"""User endpoints: nonce issuance and the authenticated identity."""

from __future__ import annotations

from fastapi import APIRouter

from wallet_auth.api.v1.dependencies import AuthFlowDep, CurrentClaimsDep
from wallet_auth.schemas.auth import NonceResponse
from wallet_auth.schemas.user import CurrentUserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=CurrentUserResponse)
async def read_current_user(claims: CurrentClaimsDep) -> CurrentUserResponse:
    """Return the account behind the bearer token."""
    return CurrentUserResponse(
        address=claims.subject,
        issued_at=claims.issued_at,
        expires_at=claims.expires_at,
    )


@router.get("/{address}/nonce", response_model=NonceResponse)
def set_nonce_for_address(address: str, auth_flow: AuthFlowDep) -> NonceResponse:
    """Issue a fresh nonce for ``address``; any earlier nonce stops working."""
    challenge = auth_flow.request_nonce(address)
    return NonceResponse(address=challenge.identity, nonce=str(challenge.nonce))
