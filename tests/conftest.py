"""
Shared fixtures for the auth tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from elikia.auth.lockout import LockoutPolicy
from elikia.auth.login import LoginOrchestrator
from elikia.auth.passwords import CredentialVerifier
from elikia.auth.tokens import TokenService
from elikia.config import load_settings
from elikia.core.models import AdminIdentity, MemberIdentity, MembershipStatus
from elikia.storage import InMemoryIdentityStore

TEST_SECRET = "test-secret-key-for-automation-only-0123456789"
NOW = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock the tests move by hand."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# =============================================================================
# Components
# =============================================================================


@pytest.fixture
def settings():
    return load_settings(
        jwt_secret_key=TEST_SECRET,
        password_hash_iterations=1_000,
        bootstrap_admin_email="",
        bootstrap_admin_password="",
        sentry_dsn="",
    )


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def verifier():
    return CredentialVerifier(iterations=1_000)


@pytest.fixture
def tokens(settings):
    return TokenService(settings)


@pytest.fixture
def lockout():
    return LockoutPolicy()


# =============================================================================
# Identities
# =============================================================================


@pytest.fixture
def admin(verifier):
    return AdminIdentity(
        id="adm_1",
        email="admin@mail.com",
        password_hash=verifier.hash("password123"),
    )


def make_member(verifier, email: str, status: str, **kwargs) -> MemberIdentity:
    return MemberIdentity(
        email=email,
        password_hash=verifier.hash("password123"),
        status=status,
        **kwargs,
    )


@pytest.fixture
def active_member(verifier):
    return make_member(verifier, "member@mail.com", MembershipStatus.ACTIVE.value)


@pytest.fixture
def store(admin, active_member):
    return InMemoryIdentityStore([admin, active_member])


@pytest.fixture
def orchestrator(store, tokens, verifier, lockout, clock):
    return LoginOrchestrator(
        store=store,
        tokens=tokens,
        verifier=verifier,
        lockout=lockout,
        clock=clock,
    )
