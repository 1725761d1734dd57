# =============================================================================
# Password Hashing
# =============================================================================
#
# One-way salted hashing with PBKDF2-HMAC-SHA256.
#
# Stored format:  pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>
#
# The iteration count travels with the hash so it can be raised later
# without invalidating existing passwords.
#
# =============================================================================

from __future__ import annotations

import hashlib
import secrets

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 100_000


class CredentialVerifier:
    """Hashes and checks passwords. Stateless; safe to share between requests."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        self.iterations = iterations

    @staticmethod
    def _derive(password: str, salt: str, iterations: int) -> str:
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations=iterations,
        ).hex()

    def hash(self, password: str) -> str:
        """
        Hash a password for storage.

        Returns: pbkdf2_sha256$iterations$salt$hash
        """
        salt = secrets.token_hex(32)
        digest = self._derive(password, salt, self.iterations)
        return f"{ALGORITHM}${self.iterations}${salt}${digest}"

    def matches(self, password: str, password_hash: str) -> bool:
        """
        Verify a password against its stored hash.

        The digests are compared with secrets.compare_digest, so the time
        taken does not depend on where they differ. A malformed stored hash
        never matches.
        """
        try:
            algorithm, iterations, salt, stored_digest = password_hash.split("$")
            if algorithm != ALGORITHM:
                return False
            digest = self._derive(password, salt, int(iterations))
        except (ValueError, AttributeError):
            return False
        return secrets.compare_digest(digest.encode("ascii"), stored_digest.encode("utf-8"))
