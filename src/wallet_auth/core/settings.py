"""Application settings and configuration.

This module defines all configuration options for the wallet auth service.
Settings are loaded from environment variables with sensible defaults and are
read once per process; the resulting object is frozen.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

JwtAlgorithm = Literal["HS256", "HS384", "HS512", "EdDSA"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or an .env file.
    Instances are immutable once constructed.
    """

    # Application metadata
    app_name: str = Field(default="Wallet Auth", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Token signing
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: JwtAlgorithm = Field(default="HS256", alias="JWT_ALGORITHM")
    # Base64 PKCS#8 (DER) or PEM encoded Ed25519 private key, required for EdDSA.
    jwt_private_key: str | None = Field(default=None, alias="JWT_PRIVATE_KEY")
    jwt_key_id: str | None = Field(default=None, alias="JWT_KEY_ID")
    access_token_expire_minutes: int = Field(
        default=60,
        ge=1,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Nonce lifecycle
    consume_nonce_on_success: bool = Field(default=True, alias="CONSUME_NONCE_ON_SUCCESS")
    nonce_ttl_seconds: int | None = Field(default=None, ge=1, alias="NONCE_TTL_SECONDS")

    # Database configuration
    database_url: str = Field(default="sqlite:///./wallet_auth.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    create_tables_on_startup: bool = Field(default=False, alias="CREATE_TABLES_ON_STARTUP")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def is_asymmetric(self) -> bool:
        """Return True when tokens are signed with a private/public key pair."""
        return self.jwt_algorithm == "EdDSA"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()  # type: ignore[call-arg]
