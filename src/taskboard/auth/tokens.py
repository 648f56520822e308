"""Opaque bearer token helpers.

A token is "<record id>|<secret>". The record id makes lookup a primary
key fetch; the secret is 40 bytes from ``secrets`` and only its SHA-256
hex digest is stored. Tokens without an id prefix are looked up by hash.

Nothing here touches the database — see services.auth_service.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from taskboard.config import settings
from taskboard.db.models import is_valid_id

TOKEN_TYPE = "Bearer"


class ParsedToken(NamedTuple):
    token_id: Optional[int]
    secret: str


def new_secret() -> str:
    """Generate the random part of a token."""
    return secrets.token_urlsafe(40)


def hash_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def format_token(token_id: int, secret: str) -> str:
    return f"{token_id}|{secret}"


def parse_token(plaintext: str) -> Optional[ParsedToken]:
    """Split a presented token. Returns None when it is obviously malformed."""
    plaintext = plaintext.strip()
    if not plaintext:
        return None
    if "|" not in plaintext:
        return ParsedToken(None, plaintext)
    raw_id, secret = plaintext.split("|", 1)
    if not (raw_id.isascii() and raw_id.isdigit()) or not secret:
        return None
    token_id = int(raw_id)
    if not is_valid_id(token_id):
        return None
    return ParsedToken(token_id, secret)


def secret_matches(secret: str, token_hash: str) -> bool:
    """Constant-time comparison of a presented secret against a stored hash."""
    return secrets.compare_digest(hash_secret(secret), token_hash)


def expiry_from_now() -> Optional[datetime]:
    """Expiry for a freshly issued token, or None when tokens never expire."""
    if settings.token_expire_minutes is None:
        return None
    return datetime.now(timezone.utc) + timedelta(minutes=settings.token_expire_minutes)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if expires_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    if expires_at.tzinfo is None:
        # SQLite hands back naive datetimes; they were written as UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now
