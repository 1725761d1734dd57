"""
Authentication error taxonomy.

Login and registration recover every one of these locally into a
structured result; only AuthorizationDenied travels to the HTTP layer,
where an exception handler renders it. ConfigurationError lives in
elikia.config and is never caught per request.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for authentication and authorization errors."""
    pass


class IdentityNotFound(AuthError):
    """No admin or member is registered with this email."""
    pass


class InvalidCredentials(AuthError):
    """Unknown email or wrong password."""
    pass


class AccountLocked(AuthError):
    """Too many failed attempts; the lockout window has not expired yet."""
    pass


class AccountNotActive(AuthError):
    """Correct password, but the membership status does not allow login."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TokenInvalidError(AuthError):
    """
    Token could not be verified.

    Malformed, unsigned, tampered and expired tokens all raise this with
    the same message so callers cannot tell the cases apart.
    """

    def __init__(self):
        super().__init__("Invalid token")


class AuthorizationDenied(AuthError):
    """A protected route refused the request."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
