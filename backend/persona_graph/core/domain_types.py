"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ActorContext is immutable and built once per request
    - Handles are compared by exact, case-sensitive equality after trimming

Design Decisions:
    - ActorContext passed explicitly into every operation that needs an acting
      persona, instead of reading a session slot inside business logic
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


# ─── Limits ──────────────────────────────────────────────────────

MAX_HANDLE_LENGTH = 64
MAX_NAME_LENGTH = 128
MAX_USERNAME_LENGTH = 64
MAX_SESSION_KEY_LENGTH = 128
DEFAULT_NAME_MAX_WORDS = 6


# ─── Enums ───────────────────────────────────────────────────────

class FollowDirection(str, Enum):
    """Which side of an edge a persona sits on."""
    FOLLOWING = "following"
    FOLLOWERS = "followers"


class CascadeStep(str, Enum):
    """Ordered cleanup steps issued by the integrity coordinator."""
    EDGES = "edges"
    PERSONA = "persona"
    PERSONAS = "personas"
    BINDINGS = "bindings"


# ─── Actor ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class ActorContext:
    """Who is acting: the authenticated account, its session, and the active persona."""
    account_username: str
    session_key: str
    active_persona_id: UUID | None = None

    @property
    def has_active_persona(self) -> bool:
        return self.active_persona_id is not None
