# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from datetime import UTC, datetime

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-wallet-auth")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from wallet_auth.api.v1.dependencies import get_token_service
from wallet_auth.core.settings import Settings, get_settings
from wallet_auth.db.session import Base
from wallet_auth.db.session import get_db as app_get_session
from wallet_auth.main import app as fastapi_app
from wallet_auth.services.nonce_store import NonceStore
from wallet_auth.services.tokens import (
    SigningKeyMaterial,
    TokenService,
    ed25519_key_material,
    hmac_key_material,
)

TEST_DB_URL = "sqlite://"
TEST_SECRET = "test-secret-key-for-wallet-auth"


class FrozenClock:
    """Callable clock returning a settable instant."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def sign_nonce(account: LocalAccount, nonce: str) -> str:
    """Sign ``nonce`` the way a wallet's personal_sign does."""
    signed = Account.sign_message(encode_defunct(text=nonce), private_key=account.key)
    return "0x" + bytes(signed.signature).hex()


def build_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {"SECRET_KEY": TEST_SECRET, "DATABASE_URL": TEST_DB_URL}
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def nonce_store(db_session: Session) -> NonceStore:
    return NonceStore(db_session)


@pytest.fixture(scope="session")
def hmac_keys() -> SigningKeyMaterial:
    return hmac_key_material(TEST_SECRET, "HS256")


@pytest.fixture(scope="session")
def ed25519_private_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture(scope="session")
def eddsa_keys(ed25519_private_key: Ed25519PrivateKey) -> SigningKeyMaterial:
    return ed25519_key_material(ed25519_private_key, "test-key")


@pytest.fixture()
def token_service(hmac_keys: SigningKeyMaterial) -> TokenService:
    return TokenService(hmac_keys)


@pytest.fixture()
def eddsa_token_service(eddsa_keys: SigningKeyMaterial) -> TokenService:
    return TokenService(eddsa_keys)


@pytest.fixture()
def test_settings() -> Settings:
    return build_settings()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    token_service: TokenService,
    test_settings: Settings,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_settings] = lambda: test_settings
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def eddsa_client(app: FastAPI, eddsa_token_service: TokenService) -> Iterator[TestClient]:
    app.dependency_overrides[get_token_service] = lambda: eddsa_token_service
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def wallet() -> LocalAccount:
    """Return the primary test wallet."""
    return Account.create()


@pytest.fixture()
def other_wallet() -> LocalAccount:
    """Return a second, unrelated wallet."""
    return Account.create()


@pytest.fixture()
def wallet_identity(wallet: LocalAccount) -> str:
    return wallet.address.lower()


@pytest.fixture()
def frozen_clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC))
