"""SQLAlchemy ORM models — single source of truth for the database schema.

Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror these definitions.

Key points:
- Integer auto-increment primary keys; ``id`` is also the pagination tie-break
- Portable column types only (runs on PostgreSQL and SQLite)
- Timestamps are set client-side so they are populated right after flush,
  without a refresh round-trip on the async session
- Ownership is by foreign key, never by containment
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    false,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Largest primary key either backend can store (BIGINT / SQLite INTEGER)
MAX_ID = 2**63 - 1


def is_valid_id(value: int) -> bool:
    return 1 <= value <= MAX_ID


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Identity
# ══════════════════════════════════════════════════════════════


class User(TimestampMixin, Base):
    """A registered account. Root owner of projects, tasks and tokens.

    The email is stored lower-cased; the unique constraint is the final
    guard against two concurrent registrations racing past the
    application-level check.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    projects: Mapped[list["Project"]] = relationship(back_populates="owner")
    tokens: Mapped[list["AccessToken"]] = relationship(back_populates="user")


class AccessToken(Base):
    """Opaque bearer token bound to one user.

    Only the SHA-256 hash of the secret is kept. The plaintext
    ("<id>|<secret>") is handed to the client once, at issuance.
    A user may hold any number of tokens (one per device/login).
    """

    __tablename__ = "access_tokens"
    __table_args__ = (
        Index("idx_access_tokens_user", "user_id"),
        Index("idx_access_tokens_hash", "token_hash", unique=True),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="api_token")
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped["User"] = relationship(back_populates="tokens")


# ══════════════════════════════════════════════════════════════
# Projects and tasks
# ══════════════════════════════════════════════════════════════


class Project(TimestampMixin, Base):
    """A named group of tasks owned by exactly one user.

    Deleting a project deletes its tasks (ProjectService.delete_project
    does it explicitly in the same transaction; the FK cascade backs it up
    on PostgreSQL).
    """

    __tablename__ = "projects"
    __table_args__ = (
        Index("idx_projects_owner", "owner_id"),
        Index("idx_projects_created", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    owner: Mapped["User"] = relationship(back_populates="projects")
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="project", order_by="Task.id", passive_deletes=True
    )


class Task(TimestampMixin, Base):
    """A unit of work created by a user, optionally filed under a project."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("idx_tasks_creator", "creator_id"),
        Index("idx_tasks_project", "project_id"),
        Index("idx_tasks_is_done", "is_done"),
        Index("idx_tasks_created", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    project_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    is_done: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    project: Mapped[Optional["Project"]] = relationship(back_populates="tasks")
