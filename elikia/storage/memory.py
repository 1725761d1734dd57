"""
In-memory identity store for development and tests.

Both identity spaces live in one dict keyed by email, which makes email
uniqueness across admins and members hold by construction.
"""

from __future__ import annotations

import asyncio
import logging

from elikia.core.models import AdminIdentity, Identity, MemberIdentity
from elikia.core.utils import mask_email, normalize_email
from elikia.storage.base import IdentityStore
from elikia.storage.errors import (
    ConcurrentUpdateError,
    DuplicateEmailError,
    IdentityMissingError,
)

logger = logging.getLogger(__name__)


class InMemoryIdentityStore(IdentityStore):
    """Dict-backed store with compare-and-set writes."""

    def __init__(self, identities: list[Identity] | None = None):
        self._identities: dict[str, Identity] = {}
        self._write_lock = asyncio.Lock()
        for identity in identities or []:
            self._put(identity)

    def _put(self, identity: Identity) -> None:
        email = normalize_email(identity.email)
        if email in self._identities:
            raise DuplicateEmailError(f"Email already in use: {mask_email(email)}")
        self._identities[email] = identity.with_changes(email=email)

    async def find_admin_by_email(self, email: str) -> AdminIdentity | None:
        identity = self._identities.get(normalize_email(email))
        return identity if isinstance(identity, AdminIdentity) else None

    async def find_member_by_email(self, email: str) -> MemberIdentity | None:
        identity = self._identities.get(normalize_email(email))
        return identity if isinstance(identity, MemberIdentity) else None

    async def add(self, identity: Identity) -> Identity:
        async with self._write_lock:
            self._put(identity)
            return self._identities[normalize_email(identity.email)]

    async def save(self, identity: Identity) -> Identity:
        email = normalize_email(identity.email)
        async with self._write_lock:
            stored = self._identities.get(email)
            if stored is None or stored.kind != identity.kind:
                raise IdentityMissingError(f"No identity stored for {mask_email(email)}")
            if stored.version != identity.version:
                raise ConcurrentUpdateError(email, identity.version, stored.version)

            committed = identity.with_changes(email=email, version=stored.version + 1)
            self._identities[email] = committed
            logger.debug(f"Saved {committed.kind} {committed.id} at version {committed.version}")
            return committed

    def __len__(self) -> int:
        return len(self._identities)
