"""Business logic services for the wallet auth service."""

from .auth_flow import AuthFlow, AuthOutcome, AuthState, NonceChallenge
from .nonce_store import Nonce, NonceStore
from .signature import SignatureVerifier
from .tokens import Claims, SigningKeyMaterial, Token, TokenService

__all__ = [
    "AuthFlow",
    "AuthOutcome",
    "AuthState",
    "Claims",
    "Nonce",
    "NonceChallenge",
    "NonceStore",
    "SignatureVerifier",
    "SigningKeyMaterial",
    "Token",
    "TokenService",
]
