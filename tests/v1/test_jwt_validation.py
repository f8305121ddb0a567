# tests/v1/test_jwt_validation.py
"""Tests for bearer token handling on protected routes."""

from datetime import timedelta

from fastapi import status
from jose import jwt

from tests.conftest import TEST_SECRET, sign_nonce
from wallet_auth.db.time import utcnow
from wallet_auth.services.tokens import TokenService

ADDRESS = "0x4675c7e5baafbffbca748158becba61ef3b0a263"


def _get_me(client, headers=None):
    return client.get("/api/v1/users/me", headers=headers or {})


class TestProtectedRoute:
    """Bearer token extraction and validation for /users/me."""

    def test_valid_token(self, client, token_service):
        token = token_service.mint(ADDRESS)

        response = _get_me(client, {"Authorization": f"Bearer {token.value}"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["address"] == ADDRESS

    def test_missing_header(self, client):
        response = _get_me(client)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "invalid_auth_token"

    def test_without_bearer_prefix(self, client):
        response = _get_me(client, {"Authorization": "InvalidToken123"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "invalid_auth_token"

    def test_basic_scheme(self, client):
        response = _get_me(client, {"Authorization": "Basic dXNlcjpwYXNz"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "invalid_auth_token"

    def test_empty_token(self, client):
        response = _get_me(client, {"Authorization": "Bearer "})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "invalid_auth_token"

    def test_malformed_token(self, client):
        response = _get_me(client, {"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_malformed"

    def test_expired_token_distinct_from_malformed(self, client, hmac_keys):
        """An authentic but expired token reports token_expired."""
        issued_two_hours_ago = TokenService(
            hmac_keys, clock=lambda: utcnow() - timedelta(hours=2)
        ).mint(ADDRESS)

        response = _get_me(client, {"Authorization": f"Bearer {issued_two_hours_ago.value}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_expired"

    def test_wrong_secret(self, client):
        now = int(utcnow().timestamp())
        token = jwt.encode(
            {"sub": ADDRESS, "iat": now, "exp": now + 3600},
            "wrong_secret_key",
            algorithm="HS256",
        )

        response = _get_me(client, {"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_signature_invalid"

    def test_wrong_algorithm(self, client):
        now = int(utcnow().timestamp())
        token = jwt.encode(
            {"sub": ADDRESS, "iat": now, "exp": now + 3600},
            TEST_SECRET,
            algorithm="HS512",
        )

        response = _get_me(client, {"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_signature_invalid"

    def test_missing_subject(self, client):
        now = int(utcnow().timestamp())
        token = jwt.encode({"iat": now, "exp": now + 3600}, TEST_SECRET, algorithm="HS256")

        response = _get_me(client, {"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_malformed"

    def test_non_address_subject(self, client):
        now = int(utcnow().timestamp())
        token = jwt.encode(
            {"sub": "someone", "iat": now, "exp": now + 3600},
            TEST_SECRET,
            algorithm="HS256",
        )

        response = _get_me(client, {"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_malformed"

    def test_hmac_token_rejected_by_eddsa_service(self, eddsa_client, token_service):
        token = token_service.mint(ADDRESS)

        response = _get_me(eddsa_client, {"Authorization": f"Bearer {token.value}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "token_signature_invalid"

    def test_eddsa_token_accepted_by_eddsa_service(self, eddsa_client, eddsa_token_service):
        token = eddsa_token_service.mint(ADDRESS)

        response = _get_me(eddsa_client, {"Authorization": f"Bearer {token.value}"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["address"] == ADDRESS


def test_login_then_access_protected_route(client, wallet):
    """End to end: nonce, signature, token, protected resource."""
    nonce = client.get(f"/api/v1/users/{wallet.address}/nonce").json()["nonce"]
    login = client.post(
        "/api/v1/auth",
        json={"address": wallet.address, "signature": sign_nonce(wallet, nonce)},
    )
    token = login.json()["jwt"]

    response = _get_me(client, {"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["address"] == wallet.address.lower()
