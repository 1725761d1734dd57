"""
Brute-force lockout policy.

    locked  <=>  lock_until is set and lies after now

Failures increment a counter; once the counter reaches the threshold the
identity is locked for a fixed window. A successful login clears both.
The policy only computes new identities; the login flow persists them.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from elikia.config import Settings
from elikia.core.models import Identity

DEFAULT_THRESHOLD = 3
DEFAULT_DURATION = timedelta(minutes=30)


class LockoutPolicy:
    """Lock/unlock transitions driven by the failed-login counter."""

    def __init__(
        self,
        threshold: int = DEFAULT_THRESHOLD,
        duration: timedelta = DEFAULT_DURATION,
    ):
        if threshold < 1:
            raise ValueError("Lockout threshold must be at least 1")
        if duration <= timedelta(0):
            raise ValueError("Lockout duration must be positive")
        self.threshold = threshold
        self.duration = duration

    @classmethod
    def from_settings(cls, settings: Settings) -> LockoutPolicy:
        return cls(threshold=settings.lockout_threshold, duration=settings.lockout_duration)

    def is_locked(self, identity: Identity, now: datetime) -> bool:
        return identity.lock_until is not None and identity.lock_until > now

    def record_failure(self, identity: Identity, now: datetime) -> Identity:
        """
        Count one failed attempt.

        The lock is set only when the new counter value reaches the
        threshold; below it, lock_until is left unset.
        """
        attempts = identity.failed_login_attempts + 1
        lock_until = now + self.duration if attempts >= self.threshold else None
        return identity.with_changes(failed_login_attempts=attempts, lock_until=lock_until)

    def record_success(self, identity: Identity) -> Identity:
        return identity.with_changes(failed_login_attempts=0, lock_until=None)
