# src/wallet_auth/main.py
"""Main entry point for the wallet auth application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wallet_auth.api.v1 import auth_router, keys_router, users_router
from wallet_auth.api.v1.dependencies import get_token_service
from wallet_auth.core.errors import AuthError, AuthErrorKind, STATUS_BY_KIND
from wallet_auth.core.logging import configure_logging
from wallet_auth.core.settings import get_settings
from wallet_auth.db.session import create_tables

logger = logging.getLogger(__name__)


def _error_response(kind: AuthErrorKind, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_KIND[kind],
        content={"detail": detail, "error": kind.value},
    )


async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    # Unexpected errors are logged with their traceback where they are raised.
    return _error_response(exc.kind, exc.public_detail)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = "; ".join(str(error.get("msg", "")) for error in exc.errors())
    return _error_response(AuthErrorKind.VALIDATION, messages or "Invalid request")


def create_app() -> FastAPI:
    """Build the FastAPI application with routers and error handlers."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Wallet-signature authentication issuing JWT sessions",
        version=settings.app_version,
    )

    app.add_exception_handler(AuthError, handle_auth_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(keys_router)

    @app.on_event("startup")
    async def on_startup() -> None:
        # Load key material now so a bad key configuration stops the process.
        token_service = get_token_service()
        logger.info("Signing session tokens with %s", token_service.algorithm)
        if settings.create_tables_on_startup:
            create_tables()

    @app.get("/healthcheck")
    async def healthcheck() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("wallet_auth.main:app", host="0.0.0.0", port=8000, reload=get_settings().debug)
