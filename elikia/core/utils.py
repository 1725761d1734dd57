"""
Shared utility functions.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique ID with optional prefix.

    Args:
        prefix: Optional prefix (e.g., "adm", "mbr")

    Returns:
        A unique ID like "mbr_a1b2c3d4e5f6"
    """
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store and look them up lower-cased."""
    return email.strip().lower()


def mask_email(email: str) -> str:
    """Mask an email for log lines: "alice@mail.com" -> "a***@mail.com"."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"
