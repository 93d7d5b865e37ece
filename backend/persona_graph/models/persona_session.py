"""PersonaSession ORM — active-persona binding for one authenticated session.

Invariants:
    - session_key is the primary key: a session has at most one active persona
    - account_username records which account bound it; a binding read by a
      different account is ignored
    - persona_id may point at a deleted persona (stale); readers re-validate

Design Decisions:
    - Stored in the DB rather than process memory: request-per-invocation model,
      no shared in-process state between workers
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from persona_graph.core.domain_types import MAX_SESSION_KEY_LENGTH, MAX_USERNAME_LENGTH
from persona_graph.db.base import Base


class PersonaSession(Base):
    """Session -> active persona binding."""
    __tablename__ = "persona_sessions"

    session_key: Mapped[str] = mapped_column(
        String(MAX_SESSION_KEY_LENGTH), primary_key=True,
    )
    account_username: Mapped[str] = mapped_column(
        String(MAX_USERNAME_LENGTH), nullable=False, index=True,
    )
    persona_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    bound_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
