"""Auth service — credential store and token issuer.

Learn: Service layer separates business logic from HTTP routing.
Routes call services, services call the database. Four operations:

- register()      → new user with a bcrypt hash (never the raw password)
- authenticate()  → email/password → fresh token, one failure shape only
- resolve_token() → bearer token → CurrentIdentity, or Unauthenticated
- revoke_token()  → delete the token record (logout)
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth import tokens
from taskboard.auth.identity import CurrentIdentity
from taskboard.auth.password import burn_verification, hash_password, verify_password
from taskboard.db.models import AccessToken, User
from taskboard.errors import InvalidCredentials, Unauthenticated, ValidationFailed

logger = structlog.get_logger()

EMAIL_TAKEN = "The email has already been taken."


class AuthService:
    """Business logic for accounts and bearer tokens."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Credential store ───────────────────────────────

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalars().first()

    async def register(self, name: str, email: str, password: str) -> User:
        """Create an account.

        Learn: the uniqueness check and the insert share one transaction,
        and the unique index decides any race between two concurrent
        registrations — the loser gets the same 422 as a plain duplicate.
        """
        email = email.lower()
        if await self.get_user_by_email(email) is not None:
            raise ValidationFailed.for_field("email", EMAIL_TAKEN)

        user = User(name=name, email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationFailed.for_field("email", EMAIL_TAKEN) from e

        logger.info("auth.registered", user_id=user.id)
        return user

    async def authenticate(self, email: str, password: str) -> str:
        """Check credentials and issue a new token.

        Unknown email and wrong password raise the same InvalidCredentials,
        and both pay for one bcrypt verification.
        """
        user = await self.get_user_by_email(email)
        if user is None:
            burn_verification(password)
            logger.info("auth.login_failed", reason="credentials")
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", reason="credentials")
            raise InvalidCredentials()

        plaintext = await self.issue_token(user)
        await self.db.commit()
        return plaintext

    # ─── Token issuer ───────────────────────────────────

    async def issue_token(self, user: User, name: str = "api_token") -> str:
        """Persist a token record and return its plaintext.

        The plaintext is not recoverable afterwards — only its hash is
        stored. The caller owns the commit.
        """
        secret = tokens.new_secret()
        record = AccessToken(
            user_id=user.id,
            name=name,
            token_hash=tokens.hash_secret(secret),
            expires_at=tokens.expiry_from_now(),
        )
        self.db.add(record)
        await self.db.flush()  # get auto-generated ID

        logger.info("auth.token_issued", user_id=user.id, token_id=record.id)
        return tokens.format_token(record.id, secret)

    async def resolve_token(self, plaintext: str) -> CurrentIdentity:
        """Map a presented bearer token back to its user."""
        parsed = tokens.parse_token(plaintext)
        if parsed is None:
            raise Unauthenticated()

        if parsed.token_id is not None:
            record = await self.db.get(AccessToken, parsed.token_id)
        else:
            result = await self.db.execute(
                select(AccessToken).where(
                    AccessToken.token_hash == tokens.hash_secret(parsed.secret)
                )
            )
            record = result.scalars().first()

        if record is None or not tokens.secret_matches(parsed.secret, record.token_hash):
            raise Unauthenticated()
        if tokens.is_expired(record.expires_at):
            raise Unauthenticated()

        user = await self.db.get(User, record.user_id)
        if user is None:
            raise Unauthenticated()

        record.last_used_at = datetime.now(timezone.utc)
        await self.db.commit()
        return CurrentIdentity(user=user, token=record)

    async def revoke_token(self, token: AccessToken) -> None:
        """Delete a token record; later requests with it are rejected."""
        await self.db.delete(token)
        await self.db.commit()
        logger.info("auth.token_revoked", user_id=token.user_id, token_id=token.id)
