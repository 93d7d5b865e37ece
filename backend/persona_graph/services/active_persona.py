"""Active-Persona Session Binder — which single persona a session acts as.

Invariants:
    - A session has at most one active persona (session_key is the binding's primary key)
    - sign_in only binds personas owned by the signing-in account
    - current_persona re-resolves the bound id on every call; a deleted persona is Stale
    - This is the only component that turns a session into an acting persona

Design Decisions:
    - load_actor builds an immutable ActorContext once per request; business logic
      receives it explicitly instead of reading session state itself
    - A binding created by a different account is ignored, not trusted
    - Upsert via session.merge: same code path for first sign-in and switching
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from persona_graph.core.domain_types import ActorContext
from persona_graph.core.errors import ErrorContext, StalePersonaError, UnauthenticatedError
from persona_graph.core.repository_protocols import PersonaDirectory, PersonaLike
from persona_graph.models.persona_session import PersonaSession

logger = logging.getLogger(__name__)


class ActivePersonaBinder:
    """Per-session active-persona slot."""

    def __init__(self, db: AsyncSession, registry: PersonaDirectory):
        self.db = db
        self.registry = registry

    async def load_actor(self, session_key: str, account_username: str) -> ActorContext:
        """Build the request's ActorContext from the stored binding, if any."""
        if not session_key or not account_username:
            raise UnauthenticatedError(
                "You must be logged in to complete this action.",
                context=ErrorContext(account=account_username or None),
            )
        binding = await self._get_binding(session_key)
        persona_id = None
        if binding is not None:
            if binding.account_username == account_username:
                persona_id = binding.persona_id
            else:
                logger.warning(
                    "Ignoring binding created by another account",
                    extra={"session_key": session_key, "account": account_username},
                )
        return ActorContext(
            account_username=account_username,
            session_key=session_key,
            active_persona_id=persona_id,
        )

    async def sign_in(self, actor: ActorContext, handle: str) -> PersonaLike:
        """Bind the session to the account's persona with this handle."""
        persona = await self.registry.get_by_owner_and_handle(actor.account_username, handle)
        await self.db.merge(PersonaSession(
            session_key=actor.session_key,
            account_username=actor.account_username,
            persona_id=persona.id,
        ))
        await self.db.commit()
        logger.info(
            f"Session now active as @{persona.handle}",
            extra={
                "persona_id": persona.id, "account": actor.account_username,
                "session_key": actor.session_key,
            },
        )
        return persona

    async def current_persona(self, actor: ActorContext) -> PersonaLike:
        """The active persona. Raises UnauthenticatedError / StalePersonaError."""
        if not actor.has_active_persona:
            raise UnauthenticatedError(
                context=ErrorContext(
                    account=actor.account_username, session_key=actor.session_key,
                ),
            )
        persona = await self.registry.find_by_id(actor.active_persona_id)
        if persona is None:
            logger.warning(
                "Session bound to a deleted persona",
                extra={
                    "persona_id": actor.active_persona_id,
                    "session_key": actor.session_key,
                    "error_code": "STALE_PERSONA",
                },
            )
            raise StalePersonaError(
                str(actor.active_persona_id),
                ErrorContext(
                    persona_id=str(actor.active_persona_id),
                    account=actor.account_username,
                ),
            )
        return persona

    async def clear(self, session_key: str) -> None:
        """Sign out of the active persona. No binding is a no-op."""
        await self.db.execute(
            delete(PersonaSession).where(PersonaSession.session_key == session_key),
        )
        await self.db.commit()
        logger.info("Active persona cleared", extra={"session_key": session_key})

    async def clear_bindings_to(self, persona_ids: Sequence[UUID]) -> int:
        """Drop every binding pointing at one of these personas."""
        if not persona_ids:
            return 0
        result = await self.db.execute(
            delete(PersonaSession).where(PersonaSession.persona_id.in_(list(persona_ids))),
        )
        await self.db.commit()
        return result.rowcount

    async def clear_account(self, account_username: str) -> int:
        """Drop every binding created by the account."""
        result = await self.db.execute(
            delete(PersonaSession).where(
                PersonaSession.account_username == account_username,
            ),
        )
        await self.db.commit()
        return result.rowcount

    async def _get_binding(self, session_key: str) -> PersonaSession | None:
        result = await self.db.execute(
            select(PersonaSession).where(PersonaSession.session_key == session_key),
        )
        return result.scalar_one_or_none()
