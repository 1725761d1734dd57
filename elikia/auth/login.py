"""
Login state machine.

Every attempt walks the same steps, strictly in this order:

    1. Lookup         email -> admin, else member        (unknown -> 401)
    2. LockCheck      locked identities stop here         (423, nothing mutated)
    3. PasswordCheck  wrong password counts a failure     (401, failure persisted)
    4. StatusCheck    members must be validated           (403, counters untouched)
    5. Success        reset counters, persist, issue token (200)

The order is part of the security contract: a locked account never reaches
password comparison, and a blocked member neither resets nor increments
the failure counter.

Concurrency: attempts against the same email are serialized in-process by a
per-email asyncio.Lock, and every write is a compare-and-set on the identity
version. A lost race re-runs the whole attempt against the fresh identity.
Persistence is the commit point; an attempt cancelled before the store write
leaves no trace.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable

from elikia.auth.errors import (
    AccountLocked,
    AccountNotActive,
    IdentityNotFound,
    InvalidCredentials,
)
from elikia.auth.lockout import LockoutPolicy
from elikia.auth.passwords import CredentialVerifier
from elikia.auth.tokens import TokenService
from elikia.config import Settings
from elikia.core.models import Identity, MemberIdentity, MembershipStatus, Role
from elikia.core.utils import mask_email, normalize_email, utc_now
from elikia.storage.base import IdentityStore
from elikia.storage.errors import ConcurrentUpdateError

logger = logging.getLogger(__name__)


# =============================================================================
# Messages
# =============================================================================

UNKNOWN_EMAIL_MESSAGE = "Invalid email or password"
WRONG_PASSWORD_MESSAGE = "Incorrect password"
LOCKED_MESSAGE = "Account temporarily locked. Please try again later."
PENDING_MESSAGE = "Your membership is currently being processed."
CANCELLED_MESSAGE = "Your membership has been cancelled. Please contact support."
NOT_ACTIVE_MESSAGE = "Your account is not active."
CONFLICT_MESSAGE = "Login could not be completed, please retry."


def inactive_reason(member: MemberIdentity) -> str:
    """Status-specific message for a member who may not log in."""
    if member.status == MembershipStatus.PENDING.value:
        return PENDING_MESSAGE
    if member.status == MembershipStatus.CANCELLED.value:
        return CANCELLED_MESSAGE
    return NOT_ACTIVE_MESSAGE


# =============================================================================
# Results
# =============================================================================


class LoginOutcome(str, Enum):
    """Terminal states of a login attempt."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    ACCOUNT_NOT_ACTIVE = "account_not_active"
    CONFLICT = "conflict"


STATUS_CODES: dict[LoginOutcome, int] = {
    LoginOutcome.SUCCESS: 200,
    LoginOutcome.INVALID_CREDENTIALS: 401,
    LoginOutcome.ACCOUNT_NOT_ACTIVE: 403,
    LoginOutcome.CONFLICT: 409,
    LoginOutcome.ACCOUNT_LOCKED: 423,
}


@dataclass(frozen=True)
class LoginResult:
    """What the caller gets back. Login never raises for credential problems."""

    outcome: LoginOutcome
    message: str
    token: str | None = None
    role: Role | None = None

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.outcome]

    @property
    def ok(self) -> bool:
        return self.outcome == LoginOutcome.SUCCESS


# =============================================================================
# Orchestrator
# =============================================================================


class LoginOrchestrator:
    """Runs login attempts against an identity store."""

    def __init__(
        self,
        store: IdentityStore,
        tokens: TokenService,
        verifier: CredentialVerifier,
        lockout: LockoutPolicy,
        clock: Callable[[], datetime] = utc_now,
        commit_attempts: int = 3,
    ):
        self.store = store
        self.tokens = tokens
        self.verifier = verifier
        self.lockout = lockout
        self.clock = clock
        self.commit_attempts = commit_attempts
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: IdentityStore,
        tokens: TokenService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> LoginOrchestrator:
        return cls(
            store=store,
            tokens=tokens or TokenService(settings),
            verifier=CredentialVerifier(settings.password_hash_iterations),
            lockout=LockoutPolicy.from_settings(settings),
            clock=clock,
            commit_attempts=settings.login_commit_attempts,
        )

    def _lock_for(self, email: str) -> asyncio.Lock:
        lock = self._locks.get(email)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[email] = lock
        return lock

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Attempt a login.

        Returns a LoginResult for every credential or account condition;
        only infrastructure failures (store unreachable, ...) propagate.
        """
        email = normalize_email(email)
        masked = mask_email(email)

        lock = self._lock_for(email)
        async with lock:
            for _ in range(self.commit_attempts):
                try:
                    identity, token = await self._authenticate(email, password)
                except IdentityNotFound:
                    logger.debug(f"Login rejected for {masked}: unknown email")
                    return LoginResult(LoginOutcome.INVALID_CREDENTIALS, UNKNOWN_EMAIL_MESSAGE)
                except AccountLocked:
                    logger.info(f"Login rejected for {masked}: account locked")
                    return LoginResult(LoginOutcome.ACCOUNT_LOCKED, LOCKED_MESSAGE)
                except InvalidCredentials:
                    logger.debug(f"Login rejected for {masked}: wrong password")
                    return LoginResult(LoginOutcome.INVALID_CREDENTIALS, WRONG_PASSWORD_MESSAGE)
                except AccountNotActive as e:
                    logger.info(f"Login rejected for {masked}: membership not active")
                    return LoginResult(LoginOutcome.ACCOUNT_NOT_ACTIVE, e.reason)
                except ConcurrentUpdateError:
                    logger.info(f"Concurrent update on {masked}, re-evaluating login")
                    continue

                logger.info(f"{identity.role.value} login successful for {masked}")
                return LoginResult(
                    LoginOutcome.SUCCESS,
                    f"{identity.role.value} login successful",
                    token=token,
                    role=identity.role,
                )

        logger.warning(f"Login for {masked} kept losing concurrent updates, giving up")
        return LoginResult(LoginOutcome.CONFLICT, CONFLICT_MESSAGE)

    async def _authenticate(self, email: str, password: str) -> tuple[Identity, str]:
        """
        One pass through the state machine.

        Raises the taxonomy error for the terminal state reached, or
        ConcurrentUpdateError when the store rejected our write.
        """
        now = self.clock()

        # 1. Lookup
        identity = await self.store.find_by_email(email)
        if identity is None:
            raise IdentityNotFound(email)

        # 2. LockCheck
        if self.lockout.is_locked(identity, now):
            raise AccountLocked(email)

        # 3. PasswordCheck
        if not self.verifier.matches(password, identity.password_hash):
            failed = self.lockout.record_failure(identity, now)
            await self.store.save(failed)
            if failed.lock_until is not None:
                logger.warning(
                    f"{identity.kind} {identity.id} locked until {failed.lock_until.isoformat()} "
                    f"after {failed.failed_login_attempts} failed attempts"
                )
            raise InvalidCredentials(email)

        # 4. StatusCheck (members only)
        if isinstance(identity, MemberIdentity) and not identity.is_active:
            raise AccountNotActive(inactive_reason(identity))

        # 5. Success
        committed = await self.store.save(self.lockout.record_success(identity))
        token = self.tokens.issue(committed.email, committed.role, now)
        return committed, token
