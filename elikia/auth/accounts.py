"""
Account lifecycle around the login core.

- register_member: self-service registration; members start pending review
- create_admin: administrators create other administrators
- set_member_status: administrators validate or cancel memberships

Only passwords, email uniqueness and status are handled here. Profile
validation (names, images, membership numbers) belongs to the membership
application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from elikia.auth.passwords import CredentialVerifier
from elikia.config import Settings
from elikia.core.models import AdminIdentity, Identity, MemberIdentity, MembershipStatus
from elikia.core.utils import mask_email, normalize_email
from elikia.storage.base import IdentityStore
from elikia.storage.errors import ConcurrentUpdateError, DuplicateEmailError

logger = logging.getLogger(__name__)

EMAIL_IN_USE_MESSAGE = "Email already in use"


@dataclass(frozen=True)
class AccountResult:
    """Outcome of an account operation, in HTTP terms."""

    status_code: int
    message: str
    identity: Identity | None = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class AccountService:
    """Creates identities and administers membership status."""

    def __init__(
        self,
        store: IdentityStore,
        verifier: CredentialVerifier,
        default_member_role: str = "BENEVOLE",
        commit_attempts: int = 3,
    ):
        self.store = store
        self.verifier = verifier
        self.default_member_role = default_member_role
        self.commit_attempts = commit_attempts

    @classmethod
    def from_settings(cls, settings: Settings, store: IdentityStore) -> AccountService:
        return cls(
            store=store,
            verifier=CredentialVerifier(settings.password_hash_iterations),
            default_member_role=settings.default_member_role,
            commit_attempts=settings.login_commit_attempts,
        )

    async def register_member(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> AccountResult:
        """Register a member awaiting admin validation."""
        member = MemberIdentity(
            email=normalize_email(email),
            password_hash=self.verifier.hash(password),
            first_name=first_name,
            last_name=last_name,
            status=MembershipStatus.PENDING.value,
            role_name=self.default_member_role,
        )
        try:
            stored = await self.store.add(member)
        except DuplicateEmailError:
            return AccountResult(409, EMAIL_IN_USE_MESSAGE)

        logger.info(f"Member {stored.id} registered ({mask_email(stored.email)})")
        return AccountResult(201, "Registration successful. Awaiting admin validation.", stored)

    async def create_admin(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> AccountResult:
        admin = AdminIdentity(
            email=normalize_email(email),
            password_hash=self.verifier.hash(password),
            first_name=first_name,
            last_name=last_name,
        )
        try:
            stored = await self.store.add(admin)
        except DuplicateEmailError:
            return AccountResult(409, EMAIL_IN_USE_MESSAGE)

        logger.info(f"Admin {stored.id} created ({mask_email(stored.email)})")
        return AccountResult(201, "Registration successful.", stored)

    async def set_member_status(
        self,
        email: str,
        status: str,
        role_name: str | None = None,
    ) -> AccountResult:
        """
        Change a member's status, and their association role when one is given.

        Lockout counters are left as they are; only a successful login resets them.
        """
        for _ in range(self.commit_attempts):
            member = await self.store.find_member_by_email(normalize_email(email))
            if member is None:
                return AccountResult(404, "Member not found")
            changes = {"status": status}
            if role_name is not None:
                changes["role_name"] = role_name
            try:
                stored = await self.store.save(member.with_changes(**changes))
            except ConcurrentUpdateError:
                continue

            logger.info(f"Member {stored.id} status set to {status}")
            return AccountResult(200, "Member updated", stored)

        return AccountResult(409, "Member changed concurrently, please retry.")
