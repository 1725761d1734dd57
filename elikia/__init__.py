"""
Elikia - authentication and request authorization for the membership platform.

Decides whether a login attempt succeeds, enforces brute-force lockout,
issues signed session tokens and gates protected routes by token and role.
"""

__version__ = "0.1.0"
