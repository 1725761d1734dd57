# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /login     - Exchange email + password for a session token
#   POST /register  - Request membership (pending admin validation)
#   GET  /me        - Claims of the current token
#
# Every route takes its policy from the route policy table.
#
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from elikia.auth.accounts import AccountService
from elikia.auth.gate import AuthContext, require
from elikia.auth.login import LoginOrchestrator
from elikia.auth.route_policies import RoutePolicyTable


# =============================================================================
# Request/Response Models
# =============================================================================

class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=254)
    password: str = Field(min_length=1, max_length=100)


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)


class ApiResponse(BaseModel):
    """Envelope shared by every endpoint: stable code + human-readable message."""
    code: str
    message: str
    token: str | None = None


class MeResponse(BaseModel):
    email: str
    role: str | None


def envelope(status_code: int, message: str, token: str | None = None) -> JSONResponse:
    body = ApiResponse(code=str(status_code), message=message, token=token)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# =============================================================================
# Dependencies
# =============================================================================

def get_login_orchestrator(request: Request) -> LoginOrchestrator:
    return request.app.state.login


def get_account_service(request: Request) -> AccountService:
    return request.app.state.accounts


# =============================================================================
# Router
# =============================================================================

def build_auth_router(policies: RoutePolicyTable) -> APIRouter:
    """Create the auth router with policies resolved from the table."""
    router = APIRouter(tags=["auth"])

    @router.post(
        "/login",
        response_model=ApiResponse,
        dependencies=[Depends(require(policies.get("auth.login")))],
        responses={401: {"model": ApiResponse}, 403: {"model": ApiResponse}, 423: {"model": ApiResponse}},
    )
    async def login(
        data: LoginRequest,
        orchestrator: LoginOrchestrator = Depends(get_login_orchestrator),
    ):
        """
        Authenticate an admin or a validated member.
        """
        result = await orchestrator.login(data.email, data.password)
        return envelope(result.status_code, result.message, result.token)

    @router.post(
        "/register",
        response_model=ApiResponse,
        status_code=201,
        dependencies=[Depends(require(policies.get("auth.register")))],
        responses={409: {"model": ApiResponse}},
    )
    async def register(
        data: RegisterRequest,
        accounts: AccountService = Depends(get_account_service),
    ):
        """
        Request membership. The account stays pending until an admin validates it.
        """
        result = await accounts.register_member(
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
        )
        return envelope(result.status_code, result.message)

    @router.get("/me", response_model=MeResponse)
    async def me(ctx: AuthContext = Depends(require(policies.get("auth.me")))):
        """
        Who the current token belongs to.
        """
        return MeResponse(email=ctx.subject, role=ctx.role)

    return router
