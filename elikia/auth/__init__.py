"""
Authentication and authorization.

Components:
1. TokenService - signs and verifies session tokens
2. CredentialVerifier - salted one-way password hashing
3. LockoutPolicy - brute-force lock/unlock transitions
4. LoginOrchestrator - the login state machine
5. AuthorizationGate - per-route token and role checks
"""

from elikia.auth.accounts import AccountResult, AccountService
from elikia.auth.errors import (
    AccountLocked,
    AccountNotActive,
    AuthError,
    AuthorizationDenied,
    IdentityNotFound,
    InvalidCredentials,
    TokenInvalidError,
)
from elikia.auth.gate import AuthContext, AuthorizationGate, RoutePolicy, require
from elikia.auth.lockout import LockoutPolicy
from elikia.auth.login import LoginOrchestrator, LoginOutcome, LoginResult
from elikia.auth.passwords import CredentialVerifier
from elikia.auth.route_policies import RoutePolicyTable, load_route_policies
from elikia.auth.tokens import TokenClaims, TokenService

__all__ = [
    # Components
    "TokenService",
    "TokenClaims",
    "CredentialVerifier",
    "LockoutPolicy",
    "LoginOrchestrator",
    "LoginOutcome",
    "LoginResult",
    "AccountService",
    "AccountResult",
    # Gate
    "AuthorizationGate",
    "AuthContext",
    "RoutePolicy",
    "RoutePolicyTable",
    "load_route_policies",
    "require",
    # Errors
    "AuthError",
    "IdentityNotFound",
    "InvalidCredentials",
    "AccountLocked",
    "AccountNotActive",
    "TokenInvalidError",
    "AuthorizationDenied",
]
