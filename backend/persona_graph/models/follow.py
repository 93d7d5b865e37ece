"""Follow ORM — directed edge "follower persona follows following persona".

Invariants:
    - (follower_id, following_id) is UNIQUE: at most one edge per ordered pair
    - Reverse direction is a distinct edge
    - followed_at is set once at creation

Design Decisions:
    - No ForeignKey to personas: referential existence is checked at write time
      and cleaned up by the integrity coordinator, never enforced by the store
      (ADR: store-agnostic cascade, orphan-tolerant reads)
    - Indexes on both endpoints: followers and following are both hot queries
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from persona_graph.db.base import Base


class Follow(Base):
    """Follow edge between two personas."""
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint(
            "follower_id", "following_id", name="uq_follows_pair",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    follower_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    followed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
