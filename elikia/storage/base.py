"""
Identity storage abstraction.

The login core never talks to a database directly. It needs two things
from persistence:

- IdentityLookup: resolve an email to at most one identity, asking the
  admin space before the member space.
- IdentityStore: commit a new version of an identity (lockout counters,
  status) with an optimistic version check, and register new identities.

Swapping the in-memory implementation for PostgreSQL means implementing
IdentityStore; the login and registration code stays unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from elikia.core.models import AdminIdentity, Identity, MemberIdentity


class IdentityLookup(ABC):
    """Read side: find identities by email."""

    @abstractmethod
    async def find_admin_by_email(self, email: str) -> AdminIdentity | None:
        """Get the admin registered with this (normalized) email."""
        pass

    @abstractmethod
    async def find_member_by_email(self, email: str) -> MemberIdentity | None:
        """Get the member registered with this (normalized) email."""
        pass

    async def find_by_email(self, email: str) -> Identity | None:
        """
        Resolve an email across both identity spaces.

        Admins are searched first. An email can never exist in both spaces,
        but the order decides which lookup runs (and logs) first.
        """
        admin = await self.find_admin_by_email(email)
        if admin is not None:
            return admin
        return await self.find_member_by_email(email)


class IdentityStore(IdentityLookup):
    """Read/write identity persistence."""

    @abstractmethod
    async def add(self, identity: Identity) -> Identity:
        """
        Register a new identity.

        Raises:
            DuplicateEmailError: email already used by an admin or a member
        """
        pass

    @abstractmethod
    async def save(self, identity: Identity) -> Identity:
        """
        Commit an updated identity.

        `identity.version` must be the version that was read. On success the
        stored copy (with the bumped version) is returned.

        Raises:
            ConcurrentUpdateError: the stored version moved on since the read
            IdentityMissingError: the identity is not stored
        """
        pass
