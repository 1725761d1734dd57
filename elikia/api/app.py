"""
FastAPI application for the Elikia authentication service.

create_app() wires the components once:

    Settings -> TokenService -> AuthorizationGate
                             -> LoginOrchestrator (+ IdentityStore)
             -> AccountService

and builds every router from the route policy table. Anything wrong with
the configuration raises ConfigurationError here, before the first request.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from elikia import __version__
from elikia.api.admin import build_admin_router
from elikia.auth.accounts import AccountService
from elikia.auth.errors import AuthorizationDenied
from elikia.auth.gate import AuthorizationGate, require
from elikia.auth.login import LoginOrchestrator
from elikia.auth.route_policies import RoutePolicyTable, load_route_policies
from elikia.auth.routes import build_auth_router, envelope
from elikia.auth.tokens import TokenService
from elikia.config import Settings, get_settings
from elikia.core.utils import mask_email, normalize_email, utc_now
from elikia.integrations.sentry import init_sentry
from elikia.storage import IdentityStore, InMemoryIdentityStore

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


async def bootstrap_admin(settings: Settings, accounts: AccountService) -> None:
    """Create the configured first administrator if it does not exist yet."""
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        return

    existing = await accounts.store.find_by_email(normalize_email(settings.bootstrap_admin_email))
    if existing is not None:
        return

    result = await accounts.create_admin(
        settings.bootstrap_admin_email, settings.bootstrap_admin_password
    )
    if result.ok:
        logger.info(f"Bootstrap admin {mask_email(settings.bootstrap_admin_email)} created")
    else:
        logger.warning(f"Bootstrap admin not created: {result.message}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings: Settings = app.state.settings

    init_sentry(settings)
    await bootstrap_admin(settings, app.state.accounts)

    logger.info(f"Elikia auth API starting in {settings.environment} mode")

    yield

    logger.info("Elikia auth API shutting down")


# =============================================================================
# Error envelope
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure leaves as {"code", "message"}; no internals reach the client."""

    @app.exception_handler(AuthorizationDenied)
    async def authorization_denied(request: Request, exc: AuthorizationDenied):
        return envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return envelope(400, "Validation error")

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"code": "500", "message": "Internal server error"},
        )


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    store: IdentityStore | None = None,
    policies: RoutePolicyTable | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Build the application.

    Raises:
        ConfigurationError: invalid settings or an incomplete route policy table
    """
    settings = settings or get_settings()
    policies = policies if policies is not None else load_route_policies()
    store = store if store is not None else InMemoryIdentityStore()

    tokens = TokenService(settings)

    app = FastAPI(
        title="Elikia Auth API",
        description="Login, lockout, session tokens and route authorization",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.tokens = tokens
    app.state.gate = AuthorizationGate(tokens, clock=clock)
    app.state.login = LoginOrchestrator.from_settings(settings, store, tokens=tokens, clock=clock)
    app.state.accounts = AccountService.from_settings(settings, store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(build_auth_router(policies))
    app.include_router(build_admin_router(policies))

    @app.get("/health", dependencies=[Depends(require(policies.get("health")))])
    async def health():
        return {"status": "ok", "version": __version__}

    return app
