"""Follow Graph Store — sole writer of follow edges.

Invariants:
    - At most one edge per ordered (follower_id, following_id) pair (pre-check + UNIQUE)
    - A persona never follows itself
    - follow() does NOT verify persona existence; callers confirm both ends first
    - Reads are orphan-tolerant: an edge whose follower or followee persona is gone
      is treated as absent (inner join on both ends)
    - Deletes are unconditional and idempotent (no join, "delete where id matches")
    - Lists are newest-first; ties broken by edge id descending for stable pages

Design Decisions:
    - Registry injected only to resolve handles to ids (list_*_by_handle)
    - Clock injected so creation timestamps are controllable in tests
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Sequence
from uuid import UUID

from sqlalchemy import select, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from persona_graph.core.domain_types import FollowDirection
from persona_graph.core.enforce_persona import check_not_self_follow
from persona_graph.core.errors import (
    ErrorContext, FollowAlreadyExistsError, ResourceNotFoundError,
)
from persona_graph.core.repository_protocols import PersonaDirectory
from persona_graph.models.follow import Follow
from persona_graph.models.persona import Persona

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FollowGraphStore:
    """Directed follow edges: create, traverse, remove."""

    def __init__(
        self,
        db: AsyncSession,
        registry: PersonaDirectory,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.registry = registry
        self._clock = clock

    # --- Writes ---------------------------------------------------------------

    async def follow(self, follower_id: UUID, following_id: UUID) -> Follow:
        """Create the edge. Raises SelfFollowError / FollowAlreadyExistsError."""
        error = check_not_self_follow(follower_id, following_id)
        if error:
            raise error

        existing = await self.db.execute(
            select(Follow.id)
            .where(Follow.follower_id == follower_id)
            .where(Follow.following_id == following_id)
        )
        if existing.scalar_one_or_none() is not None:
            logger.warning(
                "Duplicate follow rejected",
                extra={
                    "follower_id": follower_id, "following_id": following_id,
                    "error_code": "FOLLOW_ALREADY_EXISTS",
                },
            )
            raise FollowAlreadyExistsError(str(follower_id), str(following_id))

        edge = Follow(
            follower_id=follower_id,
            following_id=following_id,
            followed_at=self._clock(),
        )
        self.db.add(edge)
        try:
            await self.db.flush()
        except IntegrityError:
            # Concurrent follow of the same pair won the insert
            await self.db.rollback()
            raise FollowAlreadyExistsError(
                str(follower_id), str(following_id),
                ErrorContext(persona_id=str(follower_id)),
            )
        await self.db.commit()
        logger.info(
            "Follow created",
            extra={"follower_id": follower_id, "following_id": following_id},
        )
        return edge

    async def unfollow(self, follower_id: UUID, following_id: UUID) -> None:
        """Remove the edge. Raises ResourceNotFoundError if there is none."""
        edge = await self.get_edge(follower_id, following_id)
        await self.db.execute(delete(Follow).where(Follow.id == edge.id))
        await self.db.commit()
        logger.info(
            "Follow removed",
            extra={"follower_id": follower_id, "following_id": following_id},
        )

    async def delete_all_initiated_by(self, persona_id: UUID) -> int:
        """Unfollow everyone: remove every edge where the persona is the follower."""
        return await self._delete_where(
            Follow.follower_id == persona_id, persona_id, FollowDirection.FOLLOWING,
        )

    async def delete_all_received_by(self, persona_id: UUID) -> int:
        """Remove every edge where the persona is the followee."""
        return await self._delete_where(
            Follow.following_id == persona_id, persona_id, FollowDirection.FOLLOWERS,
        )

    async def delete_all_touching(self, persona_id: UUID) -> int:
        """Remove every edge where the persona is either party, in one statement."""
        result = await self.db.execute(
            delete(Follow).where(
                or_(Follow.follower_id == persona_id, Follow.following_id == persona_id),
            )
        )
        await self.db.commit()
        logger.info(
            f"Removed {result.rowcount} edge(s) touching persona",
            extra={"persona_id": persona_id},
        )
        return result.rowcount

    # --- Reads ----------------------------------------------------------------

    async def get_by_id(self, follow_id: UUID) -> Follow:
        result = await self.db.execute(
            self._valid_edges().where(Follow.id == follow_id),
        )
        edge = result.scalar_one_or_none()
        if edge is None:
            raise ResourceNotFoundError("Follow", str(follow_id))
        return edge

    async def find_edge(self, follower_id: UUID, following_id: UUID) -> Follow | None:
        result = await self.db.execute(
            self._valid_edges()
            .where(Follow.follower_id == follower_id)
            .where(Follow.following_id == following_id)
        )
        return result.scalar_one_or_none()

    async def get_edge(self, follower_id: UUID, following_id: UUID) -> Follow:
        edge = await self.find_edge(follower_id, following_id)
        if edge is None:
            raise ResourceNotFoundError(
                "Follow", f"{follower_id}->{following_id}",
                ErrorContext(persona_id=str(follower_id)),
            )
        return edge

    async def list_following(self, persona_id: UUID) -> Sequence[Follow]:
        """Edges the persona initiated, newest first."""
        return await self._list(
            self._valid_edges().where(Follow.follower_id == persona_id),
        )

    async def list_followers(self, persona_id: UUID) -> Sequence[Follow]:
        """Edges the persona received, newest first."""
        return await self._list(
            self._valid_edges().where(Follow.following_id == persona_id),
        )

    async def list_all(self) -> Sequence[Follow]:
        return await self._list(self._valid_edges())

    async def list_following_by_handle(self, handle: str) -> Sequence[Follow]:
        persona = await self.registry.get_by_handle(handle)
        return await self.list_following(persona.id)

    async def list_followers_by_handle(self, handle: str) -> Sequence[Follow]:
        persona = await self.registry.get_by_handle(handle)
        return await self.list_followers(persona.id)

    # --- Helpers --------------------------------------------------------------

    @staticmethod
    def _valid_edges():
        """Edges whose both endpoints still exist."""
        follower = aliased(Persona)
        following = aliased(Persona)
        return (
            select(Follow)
            .join(follower, follower.id == Follow.follower_id)
            .join(following, following.id == Follow.following_id)
        )

    async def _list(self, query) -> Sequence[Follow]:
        result = await self.db.execute(
            query.order_by(Follow.followed_at.desc(), Follow.id.desc()),
        )
        return result.scalars().all()

    async def _delete_where(
        self, condition, persona_id: UUID, direction: FollowDirection,
    ) -> int:
        result = await self.db.execute(delete(Follow).where(condition))
        await self.db.commit()
        logger.info(
            f"Removed {result.rowcount} {direction.value} edge(s)",
            extra={"persona_id": persona_id},
        )
        return result.rowcount
