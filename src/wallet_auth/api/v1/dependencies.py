"""Shared API dependencies for authentication and common functionality."""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from wallet_auth.core.errors import InvalidAuthTokenError
from wallet_auth.core.settings import Settings, get_settings
from wallet_auth.db.session import get_db
from wallet_auth.services.auth_flow import AuthFlow
from wallet_auth.services.nonce_store import NonceStore
from wallet_auth.services.signature import SignatureVerifier
from wallet_auth.services.tokens import Claims, TokenService

# Missing or non-bearer headers are reported as InvalidAuthTokenError below.
bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[Session, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@lru_cache
def get_token_service() -> TokenService:
    """Return the process-wide token service built from settings."""
    return TokenService.from_settings(get_settings())


def get_signature_verifier() -> SignatureVerifier:
    return SignatureVerifier()


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
VerifierDep = Annotated[SignatureVerifier, Depends(get_signature_verifier)]


def get_nonce_store(db: SessionDep, settings: SettingsDep) -> NonceStore:
    max_age = (
        timedelta(seconds=settings.nonce_ttl_seconds)
        if settings.nonce_ttl_seconds is not None
        else None
    )
    return NonceStore(db, max_age=max_age)


NonceStoreDep = Annotated[NonceStore, Depends(get_nonce_store)]


def get_auth_flow(
    nonce_store: NonceStoreDep,
    verifier: VerifierDep,
    token_service: TokenServiceDep,
    settings: SettingsDep,
) -> AuthFlow:
    """Assemble the authentication flow for one request."""
    return AuthFlow(
        nonce_store,
        verifier,
        token_service,
        consume_on_success=settings.consume_nonce_on_success,
    )


AuthFlowDep = Annotated[AuthFlow, Depends(get_auth_flow)]


def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    token_service: TokenServiceDep,
) -> Claims:
    """Validate the bearer token on the request and return its claims.

    Raises:
        InvalidAuthTokenError: If the Authorization header is missing or not a bearer token.
        TokenExpiredError: If the token has expired.
        TokenMalformedError: If the token cannot be decoded.
        TokenSignatureInvalidError: If the token signature or algorithm is wrong.
    """
    if credentials is None or not credentials.credentials.strip():
        raise InvalidAuthTokenError()
    return token_service.validate(credentials.credentials.strip())


CurrentClaimsDep = Annotated[Claims, Depends(get_current_claims)]
