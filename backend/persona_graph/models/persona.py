"""Persona ORM — persists one public identity owned by an account.

Invariants:
    - id is UUID primary key (client-side default)
    - handle is UNIQUE: the store is the authoritative uniqueness check
    - account_username is set at creation and never updated
    - No foreign key to accounts: accounts are external records

Design Decisions:
    - Owner referenced by username string, not id: the identity layer above
      speaks usernames (ADR: mirrors the account contract)
    - Unique constraint named explicitly so migrations and IntegrityError
      translation agree on it
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from persona_graph.core.domain_types import (
    MAX_HANDLE_LENGTH, MAX_NAME_LENGTH, MAX_USERNAME_LENGTH,
)
from persona_graph.db.base import Base


class Persona(Base):
    """Persona entity — a named public identity."""
    __tablename__ = "personas"
    __table_args__ = (
        UniqueConstraint("handle", name="uq_personas_handle"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    account_username: Mapped[str] = mapped_column(
        String(MAX_USERNAME_LENGTH), nullable=False, index=True,
    )
    handle: Mapped[str] = mapped_column(
        String(MAX_HANDLE_LENGTH), nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
