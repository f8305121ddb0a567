"""Error taxonomy for the authentication flow.

Every failure the service reports to a client is one of the kinds below. The
mapping from kind to HTTP status lives in ``STATUS_BY_KIND`` and is the only
place where status codes are decided.
"""

from __future__ import annotations

from enum import Enum

from fastapi import status


class AuthErrorKind(str, Enum):
    """Closed set of failure kinds surfaced by the service."""

    VALIDATION = "validation_error"
    NO_CHALLENGE_ISSUED = "no_challenge_issued"
    SIGNATURE_INVALID = "signature_invalid"
    INVALID_AUTH_TOKEN = "invalid_auth_token"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_SIGNATURE_INVALID = "token_signature_invalid"
    UNEXPECTED = "unexpected_error"


STATUS_BY_KIND: dict[AuthErrorKind, int] = {
    AuthErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.NO_CHALLENGE_ISSUED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.SIGNATURE_INVALID: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_AUTH_TOKEN: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.TOKEN_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.TOKEN_MALFORMED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.TOKEN_SIGNATURE_INVALID: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AuthError(Exception):
    """Base class for all client-visible authentication failures."""

    kind: AuthErrorKind = AuthErrorKind.UNEXPECTED
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    @property
    def public_detail(self) -> str:
        """Message safe to return to the client."""
        if self.kind is AuthErrorKind.UNEXPECTED:
            return UnexpectedAuthError.default_detail
        return self.detail


class AuthValidationError(AuthError):
    """Malformed address, signature or request body."""

    kind = AuthErrorKind.VALIDATION
    default_detail = "Invalid request"


class NoChallengeIssuedError(AuthError):
    """A signature was submitted for an identity without an outstanding nonce."""

    kind = AuthErrorKind.NO_CHALLENGE_ISSUED
    default_detail = "No challenge has been issued for this address"


class SignatureInvalidError(AuthError):
    """The signature does not prove control of the claimed address."""

    kind = AuthErrorKind.SIGNATURE_INVALID
    default_detail = "Signature verification failed"

    def __init__(self) -> None:
        # One message for every cause so callers cannot probe which input was wrong.
        super().__init__(self.default_detail)


class InvalidAuthTokenError(AuthError):
    """The Authorization header is missing or is not a bearer token."""

    kind = AuthErrorKind.INVALID_AUTH_TOKEN
    default_detail = "Header doesn't contain a bearer auth token"


class TokenExpiredError(AuthError):
    kind = AuthErrorKind.TOKEN_EXPIRED
    default_detail = "Expired auth token"


class TokenMalformedError(AuthError):
    kind = AuthErrorKind.TOKEN_MALFORMED
    default_detail = "Malformed auth token"


class TokenSignatureInvalidError(AuthError):
    kind = AuthErrorKind.TOKEN_SIGNATURE_INVALID
    default_detail = "Auth token signature is invalid"


class UnexpectedAuthError(AuthError):
    """Persistence or crypto-library fault not attributable to the caller."""

    kind = AuthErrorKind.UNEXPECTED
    default_detail = "Internal server error"
