"""
Core data model shared by the authentication components.
"""

from elikia.core.models import (
    AdminIdentity,
    Identity,
    MemberIdentity,
    MembershipStatus,
    Role,
)
from elikia.core.utils import generate_id, mask_email, utc_now

__all__ = [
    "AdminIdentity",
    "Identity",
    "MemberIdentity",
    "MembershipStatus",
    "Role",
    "generate_id",
    "mask_email",
    "utc_now",
]
