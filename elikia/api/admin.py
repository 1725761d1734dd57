"""
Administration routes.

    POST  /admins                   - Create an administrator
    PATCH /members/{email}/status   - Validate, cancel or otherwise change a membership

Both require an ADMIN token (see route_policies.yaml).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field

from elikia.auth.accounts import AccountService
from elikia.auth.gate import AuthContext, require
from elikia.auth.route_policies import RoutePolicyTable
from elikia.auth.routes import ApiResponse, envelope, get_account_service
from elikia.core.utils import mask_email

logger = logging.getLogger(__name__)


class CreateAdminRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)


class MemberStatusRequest(BaseModel):
    status: str = Field(min_length=1, max_length=50)  # VALIDE, ANNULEE, ...
    role_name: str | None = Field(default=None, min_length=1, max_length=50)  # association role


def build_admin_router(policies: RoutePolicyTable) -> APIRouter:
    router = APIRouter(tags=["admin"])

    @router.post("/admins", response_model=ApiResponse, status_code=201)
    async def create_admin(
        data: CreateAdminRequest,
        ctx: AuthContext = Depends(require(policies.get("admin.create_admin"))),
        accounts: AccountService = Depends(get_account_service),
    ):
        result = await accounts.create_admin(
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
        )
        if result.ok:
            logger.info(f"Admin account created by {mask_email(ctx.subject)}")
        return envelope(result.status_code, result.message)

    @router.patch("/members/{email}/status", response_model=ApiResponse)
    async def set_member_status(
        email: str,
        data: MemberStatusRequest,
        ctx: AuthContext = Depends(require(policies.get("admin.set_member_status"))),
        accounts: AccountService = Depends(get_account_service),
    ):
        result = await accounts.set_member_status(email, data.status, data.role_name)
        if result.ok:
            logger.info(f"Membership status changed by {mask_email(ctx.subject)}")
        return envelope(result.status_code, result.message)

    return router
