"""
Storage errors.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for identity store errors."""
    pass


class ConcurrentUpdateError(StorageError):
    """The identity changed since it was read; the write was not applied."""

    def __init__(self, email: str, expected_version: int, actual_version: int | None):
        super().__init__(
            f"Stale identity version {expected_version} (stored: {actual_version})"
        )
        self.email = email
        self.expected_version = expected_version
        self.actual_version = actual_version


class DuplicateEmailError(StorageError):
    """The email is already registered as an admin or a member."""
    pass


class IdentityMissingError(StorageError):
    """Tried to update an identity that is not stored."""
    pass
