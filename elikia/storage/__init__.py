"""
Identity storage.

- IdentityLookup / IdentityStore: interfaces the login core depends on
- InMemoryIdentityStore: development and test implementation
"""

from elikia.storage.base import IdentityLookup, IdentityStore
from elikia.storage.errors import (
    ConcurrentUpdateError,
    DuplicateEmailError,
    IdentityMissingError,
    StorageError,
)
from elikia.storage.memory import InMemoryIdentityStore

__all__ = [
    "IdentityLookup",
    "IdentityStore",
    "InMemoryIdentityStore",
    "StorageError",
    "ConcurrentUpdateError",
    "DuplicateEmailError",
    "IdentityMissingError",
]
