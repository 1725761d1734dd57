# =============================================================================
# Session Tokens
# =============================================================================
#
# Signed bearer tokens (JWT, HMAC):
#   - issue:        sign {sub, role, iat, exp} at login
#   - verify:       signature + validity window, collapsed to valid/invalid
#   - extract_role: role claim of a token that verifies
#
# Tokens are stateless. Nothing is stored server-side and nothing revokes
# a token early: expiry is the only invalidation.
#
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timezone

import jwt
from pydantic import BaseModel

from elikia.auth.errors import TokenInvalidError
from elikia.config import Settings
from elikia.core.models import Role
from elikia.core.utils import utc_now

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class TokenClaims(BaseModel):
    """Verified token claims."""
    sub: str  # email
    role: str | None = None  # "ADMIN" or "MEMBER"
    iat: datetime
    exp: datetime


class TokenService:
    """
    Issues and verifies session tokens.

    The secret comes from settings validated at startup, so every method
    here can assume a usable key and lifetime.
    """

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self.lifetime = settings.token_lifetime

    # =========================================================================
    # Creation
    # =========================================================================

    def issue(self, subject: str, role: Role | str, now: datetime | None = None) -> str:
        """
        Create a signed token valid from `now` for the configured lifetime.

        iat/exp keep fractional seconds (NumericDate allows them), so the
        token never expires before now + lifetime.
        """
        issued_at = (now or utc_now()).timestamp()
        expires_at = issued_at + self.lifetime.total_seconds()

        payload = {
            "sub": subject,
            "role": role.value if isinstance(role, Role) else role,
            "iat": issued_at,
            "exp": expires_at,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    # =========================================================================
    # Validation
    # =========================================================================

    def decode(self, token: str, now: datetime | None = None) -> TokenClaims:
        """
        Decode and validate a token.

        Valid means: signed with our key and algorithm, carries sub/iat/exp,
        and iat <= now < exp.

        Raises:
            TokenInvalidError: for every kind of failure, always the same message
        """
        if not token or not isinstance(token, str):
            raise TokenInvalidError()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # The validity window is checked below against the injected clock
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {type(e).__name__}")
            raise TokenInvalidError() from None

        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        subject = payload.get("sub")
        role = payload.get("role")
        if not _is_timestamp(issued_at) or not _is_timestamp(expires_at):
            raise TokenInvalidError()
        if not isinstance(subject, str) or (role is not None and not isinstance(role, str)):
            raise TokenInvalidError()

        try:
            # Compared as datetimes, at microsecond precision
            issued = datetime.fromtimestamp(issued_at, tz=timezone.utc)
            expires = datetime.fromtimestamp(expires_at, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise TokenInvalidError() from None

        if not issued <= (now or utc_now()) < expires:
            logger.debug("Token rejected: outside validity window")
            raise TokenInvalidError()

        return TokenClaims(sub=subject, role=role, iat=issued, exp=expires)

    def verify(self, token: str, now: datetime | None = None) -> bool:
        """True if the token is valid now. The reason for a failure is not exposed."""
        try:
            self.decode(token, now)
        except TokenInvalidError:
            return False
        return True

    def extract_role(self, token: str, now: datetime | None = None) -> str | None:
        """
        Role claim of a verified token.

        Call only after verify() succeeded. The token is verified again here,
        so an unverified token raises instead of leaking unchecked claims.

        Raises:
            TokenInvalidError: token does not verify
        """
        return self.decode(token, now).role


def _is_timestamp(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
