"""
Authorization gate - the per-request check in front of protected routes.

Each route declares a RoutePolicy (from the route policy table). The gate
decides, in order:

    auth not required                  -> allow (anonymous context)
    no "Authorization: Bearer <token>" -> 401
    token does not verify              -> 403
    required role missing / different  -> 403
    otherwise                          -> allow, handler gets AuthContext

Usage in routes:

    @router.get("/me")
    async def me(ctx: AuthContext = Depends(require(policies.get("auth.me")))):
        return {"email": ctx.subject, "role": ctx.role}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from fastapi import Request

from elikia.auth.errors import AuthorizationDenied, TokenInvalidError
from elikia.auth.tokens import TokenService
from elikia.core.models import Role
from elikia.core.utils import utc_now

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

MISSING_HEADER_MESSAGE = "Authorization header missing"
INVALID_TOKEN_MESSAGE = "Invalid token"
ACCESS_DENIED_MESSAGE = "Access denied"


# =============================================================================
# Policy and context
# =============================================================================


@dataclass(frozen=True)
class RoutePolicy:
    """What a route demands from the caller."""

    auth_required: bool = True
    required_role: str | None = None

    @classmethod
    def public(cls) -> RoutePolicy:
        return cls(auth_required=False)

    @classmethod
    def authenticated(cls) -> RoutePolicy:
        return cls(auth_required=True)

    @classmethod
    def role(cls, role: Role | str) -> RoutePolicy:
        return cls(auth_required=True, required_role=role.value if isinstance(role, Role) else role)


@dataclass(frozen=True)
class AuthContext:
    """
    Trusted identity of the caller, taken from a verified token.

    Anonymous on public routes.
    """

    subject: str | None = None
    role: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.subject is not None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls()


# =============================================================================
# Gate
# =============================================================================


class AuthorizationGate:
    """Applies a RoutePolicy to the Authorization header of a request."""

    def __init__(self, tokens: TokenService, clock: Callable[[], datetime] = utc_now):
        self.tokens = tokens
        self.clock = clock

    def authorize(
        self,
        authorization: str | None,
        policy: RoutePolicy,
        now: datetime | None = None,
    ) -> AuthContext:
        """
        Check a request against a policy.

        Raises:
            AuthorizationDenied: 401 without a bearer header, 403 otherwise
        """
        if not policy.auth_required:
            return AuthContext.anonymous()

        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise AuthorizationDenied(401, MISSING_HEADER_MESSAGE)

        token = authorization[len(BEARER_PREFIX):]

        try:
            claims = self.tokens.decode(token, now or self.clock())
        except TokenInvalidError:
            raise AuthorizationDenied(403, INVALID_TOKEN_MESSAGE) from None

        if policy.required_role is not None:
            # Exact, case-sensitive comparison
            if claims.role is None or claims.role != policy.required_role:
                logger.info(
                    f"Role {claims.role!r} denied on route requiring {policy.required_role!r}"
                )
                raise AuthorizationDenied(403, ACCESS_DENIED_MESSAGE)

        return AuthContext(subject=claims.sub, role=claims.role)


# =============================================================================
# FastAPI dependency
# =============================================================================


def require(policy: RoutePolicy) -> Callable:
    """
    FastAPI dependency enforcing `policy`.

    Resolves to the caller's AuthContext; the gate itself is taken from
    app.state so every route shares the one built at startup.
    """

    async def dependency(request: Request) -> AuthContext:
        gate: AuthorizationGate = request.app.state.gate
        return gate.authorize(request.headers.get("Authorization"), policy)

    return dependency
