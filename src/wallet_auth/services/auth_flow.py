"""Challenge-response authentication flow.

A client first requests a nonce for its address, signs it with its wallet and
submits ``{address, signature}``. The flow checks the signature against the
stored nonce and, on success, mints a session token. Every failure surfaces as
an ``AuthError``; nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from wallet_auth.core.errors import (
    AuthValidationError,
    NoChallengeIssuedError,
    SignatureInvalidError,
    UnexpectedAuthError,
)
from wallet_auth.services.identity import to_identity
from wallet_auth.services.nonce_store import (
    Nonce,
    NonceExpiredError,
    NonceNotFoundError,
    NonceStore,
)
from wallet_auth.services.signature import SignatureVerifier
from wallet_auth.services.tokens import Claims, TokenService

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    NONCE_REQUESTED = "nonce_requested"
    NONCE_ISSUED = "nonce_issued"
    SIGNATURE_SUBMITTED = "signature_submitted"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


@dataclass(frozen=True)
class NonceChallenge:
    """Nonce issued to a canonical identity."""

    identity: str
    nonce: Nonce


@dataclass(frozen=True)
class AuthOutcome:
    """Result of a successful authentication."""

    identity: str
    token: str
    claims: Claims
    jwk: dict[str, str] | None
    state: AuthState = AuthState.AUTHENTICATED


def _canonical(address: str) -> str:
    try:
        return to_identity(address)
    except ValueError as err:
        raise AuthValidationError(f"Failed to validate address: {err}") from err


class AuthFlow:
    """Orchestrates nonce issuance, signature checks and token minting.

    Args:
        nonce_store: Store holding the pending nonce per identity.
        verifier: Signature verifier for wallet-signed nonces.
        token_service: Service minting session tokens.
        consume_on_success: Clear the nonce after a successful login so the
            same signature cannot be replayed.
    """

    def __init__(
        self,
        nonce_store: NonceStore,
        verifier: SignatureVerifier,
        token_service: TokenService,
        *,
        consume_on_success: bool = True,
    ) -> None:
        self._nonces = nonce_store
        self._verifier = verifier
        self._tokens = token_service
        self._consume_on_success = consume_on_success

    def _transition(self, identity: str, state: AuthState) -> None:
        logger.debug("Auth attempt for %s -> %s", identity, state.value)

    def request_nonce(self, address: str) -> NonceChallenge:
        """Issue a fresh nonce for ``address``, invalidating any earlier one."""
        identity = _canonical(address)
        self._transition(identity, AuthState.NONCE_REQUESTED)
        try:
            nonce = self._nonces.issue(identity)
        except SQLAlchemyError as err:
            logger.exception("Failed to store nonce for %s", identity)
            raise UnexpectedAuthError("Failed to store nonce") from err
        self._transition(identity, AuthState.NONCE_ISSUED)
        return NonceChallenge(identity=identity, nonce=nonce)

    def authenticate(self, address: str, signature: str) -> AuthOutcome:
        """Check ``signature`` over the pending nonce and mint a token.

        Raises:
            AuthValidationError: If ``address`` is malformed.
            NoChallengeIssuedError: If no usable nonce is pending.
            SignatureInvalidError: If the signature does not match the address.
            UnexpectedAuthError: On persistence failures.
        """
        identity = _canonical(address)
        self._transition(identity, AuthState.SIGNATURE_SUBMITTED)
        try:
            return self._authenticate(identity, signature)
        except (NoChallengeIssuedError, SignatureInvalidError):
            self._transition(identity, AuthState.REJECTED)
            raise
        except SQLAlchemyError as err:
            self._transition(identity, AuthState.REJECTED)
            logger.exception("Persistence failure while authenticating %s", identity)
            raise UnexpectedAuthError("Failed to read nonce") from err

    def _authenticate(self, identity: str, signature: str) -> AuthOutcome:
        try:
            nonce = self._nonces.current(identity)
        except NonceExpiredError as err:
            raise NoChallengeIssuedError("Challenge for this address has expired") from err
        except NonceNotFoundError as err:
            raise NoChallengeIssuedError() from err

        if not self._verifier.verify(str(nonce), signature, identity):
            raise SignatureInvalidError()

        token = self._tokens.mint(identity)
        if self._consume_on_success and not self._nonces.consume(identity, nonce):
            # A concurrent attempt used or replaced this nonce first.
            raise NoChallengeIssuedError()

        self._transition(identity, AuthState.AUTHENTICATED)
        logger.info("Authenticated %s", identity)
        return AuthOutcome(
            identity=identity,
            token=token.value,
            claims=token.claims,
            jwk=self._tokens.public_jwk,
        )
