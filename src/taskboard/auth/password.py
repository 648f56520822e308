"""Password hashing utilities.

Uses bcrypt for password hashing. bcrypt salts automatically; the work
factor comes from settings (12 in production, lowered in tests).
"""

from functools import lru_cache

import bcrypt

from taskboard.config import settings


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    bcrypt includes a random salt and produces hashes starting with "$2b$".
    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("taskboard-dummy-password")


def burn_verification(password: str) -> None:
    """Run a full bcrypt check against a throwaway hash.

    Called when a login names an unknown email, so that path costs the
    same as a wrong password on a real account.
    """
    verify_password(password, _dummy_hash())
