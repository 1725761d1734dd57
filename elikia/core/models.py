"""
Identity data model.

Two disjoint identity spaces can authenticate: administrators and members.
Both are modelled as one tagged union so the login flow handles them
uniformly, while the role carried in tokens is derived from the tag.

Identities are immutable. Lockout transitions return copies, and nothing
changes for other requests until the store commits the copy.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from elikia.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Coarse-grained permission tag carried in tokens."""

    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class MembershipStatus(str, Enum):
    """Known membership statuses. Stored statuses may hold other values too."""

    PENDING = "INSCRIPTION_TRANSMISE"  # Registration received, awaiting review
    ACTIVE = "VALIDE"                  # Validated by an administrator
    CANCELLED = "ANNULEE"              # Membership cancelled


# =============================================================================
# Identities
# =============================================================================


class _IdentityBase(BaseModel):
    """Attributes shared by every identity that can authenticate."""

    model_config = {"frozen": True}

    id: str
    email: str  # lower-cased, unique across both identity spaces
    password_hash: str
    first_name: str = ""
    last_name: str = ""

    # Lockout state
    failed_login_attempts: int = Field(default=0, ge=0)
    lock_until: datetime | None = None

    created_at: date = Field(default_factory=lambda: utc_now().date())

    # Optimistic concurrency token, bumped by the store on every save
    version: int = 0

    def with_changes(self, **changes) -> "Identity":
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)


class AdminIdentity(_IdentityBase):
    """Platform administrator."""

    kind: Literal["admin"] = "admin"
    id: str = Field(default_factory=lambda: generate_id("adm"))

    @property
    def role(self) -> Role:
        return Role.ADMIN


class MemberIdentity(_IdentityBase):
    """Association member. Must be validated before logging in."""

    kind: Literal["member"] = "member"
    id: str = Field(default_factory=lambda: generate_id("mbr"))

    status: str = MembershipStatus.PENDING.value
    role_name: str = "BENEVOLE"  # association role reference, not a token role

    @property
    def role(self) -> Role:
        return Role.MEMBER

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE.value


Identity = Annotated[Union[AdminIdentity, MemberIdentity], Field(discriminator="kind")]
