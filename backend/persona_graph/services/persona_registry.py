"""Persona Registry — sole writer of persona records.

Invariants:
    - Handle is unique across all personas at any instant (pre-check + UNIQUE constraint)
    - Handle lookups are exact, case-sensitive equality on the trimmed handle
    - account_username never changes after creation
    - Every mutation commits before returning (read-your-writes, no cache)
    - delete() does not cascade; that is the integrity coordinator's job

Design Decisions:
    - Optimistic validation, authoritative constraint: the pre-read gives a clean
      error in the common case, the store's IntegrityError on flush catches the
      race between two concurrent creates and is translated to HandleConflictError
    - find_* return None, get_* raise ResourceNotFoundError (same split as
      get_session_or_404 in the routes)
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from persona_graph.core.domain_types import DEFAULT_NAME_MAX_WORDS
from persona_graph.core.enforce_persona import (
    normalize_handle, validate_persona_fields, validate_persona_update,
)
from persona_graph.core.errors import (
    ErrorContext, HandleConflictError, OwnershipMismatchError, ResourceNotFoundError,
)
from persona_graph.models.persona import Persona

logger = logging.getLogger(__name__)


class PersonaRegistry:
    """Creation, lookup, update and removal of personas."""

    def __init__(self, db: AsyncSession, name_max_words: int = DEFAULT_NAME_MAX_WORDS):
        self.db = db
        self.name_max_words = name_max_words

    # --- Writes ---------------------------------------------------------------

    async def create(self, account_username: str, handle: str, name: str) -> Persona:
        """Create a persona for the account. Raises InvalidFormatError / HandleConflictError."""
        handle = normalize_handle(handle) if handle is not None else handle
        error = validate_persona_fields(handle, name, self.name_max_words)
        if error:
            raise error

        if await self.find_by_handle(handle):
            logger.warning(
                f"Handle '{handle}' already taken",
                extra={"account": account_username, "error_code": "HANDLE_CONFLICT"},
            )
            raise HandleConflictError(handle, ErrorContext(account=account_username))

        persona = Persona(account_username=account_username, handle=handle, name=name)
        self.db.add(persona)
        await self._flush_or_conflict(handle, account_username)
        await self.db.commit()
        logger.info(
            f"Persona @{handle} created",
            extra={"persona_id": persona.id, "account": account_username},
        )
        return persona

    async def update(
        self, persona_id: UUID, name: str | None = None, handle: str | None = None,
    ) -> Persona:
        """Update name and/or handle. A changed handle is re-checked against other personas."""
        if handle is not None:
            handle = normalize_handle(handle)
        error = validate_persona_update(handle, name, self.name_max_words)
        if error:
            raise error

        persona = await self.get_by_id(persona_id)
        if handle is not None and handle != persona.handle:
            holder = await self.find_by_handle(handle)
            if holder is not None and holder.id != persona.id:
                raise HandleConflictError(
                    handle, ErrorContext(persona_id=str(persona.id)),
                )
            persona.handle = handle
        if name is not None:
            persona.name = name

        await self._flush_or_conflict(persona.handle, persona.account_username)
        await self.db.commit()
        logger.info(
            f"Persona @{persona.handle} updated",
            extra={"persona_id": persona.id, "account": persona.account_username},
        )
        return persona

    async def delete(self, persona_id: UUID) -> None:
        """Remove the persona record. Absent records are a no-op."""
        await self.db.execute(delete(Persona).where(Persona.id == persona_id))
        await self.db.commit()
        logger.info("Persona deleted", extra={"persona_id": persona_id})

    async def delete_all_owned_by(self, account_username: str) -> int:
        """Batch-remove every persona of the account; returns how many were removed."""
        result = await self.db.execute(
            delete(Persona).where(Persona.account_username == account_username),
        )
        await self.db.commit()
        logger.info(
            f"Deleted {result.rowcount} persona(s)",
            extra={"account": account_username},
        )
        return result.rowcount

    # --- Reads ----------------------------------------------------------------

    async def find_by_id(self, persona_id: UUID) -> Persona | None:
        result = await self.db.execute(
            select(Persona).where(Persona.id == persona_id),
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, persona_id: UUID) -> Persona:
        persona = await self.find_by_id(persona_id)
        if persona is None:
            raise ResourceNotFoundError("Persona", str(persona_id))
        return persona

    async def find_by_handle(self, handle: str) -> Persona | None:
        result = await self.db.execute(
            select(Persona).where(Persona.handle == normalize_handle(handle)),
        )
        return result.scalar_one_or_none()

    async def get_by_handle(self, handle: str) -> Persona:
        persona = await self.find_by_handle(handle)
        if persona is None:
            raise ResourceNotFoundError("Persona", normalize_handle(handle))
        return persona

    async def get_by_owner_and_handle(self, account_username: str, handle: str) -> Persona:
        """Persona with this handle under this account, else ResourceNotFoundError."""
        result = await self.db.execute(
            select(Persona)
            .where(Persona.account_username == account_username)
            .where(Persona.handle == normalize_handle(handle))
        )
        persona = result.scalar_one_or_none()
        if persona is None:
            raise ResourceNotFoundError(
                "Persona", normalize_handle(handle),
                ErrorContext(account=account_username),
            )
        return persona

    async def get_owned(self, persona_id: UUID, account_username: str) -> Persona:
        """Persona by id that must belong to the account."""
        persona = await self.get_by_id(persona_id)
        if persona.account_username != account_username:
            raise OwnershipMismatchError(
                persona.handle, account_username,
                ErrorContext(persona_id=str(persona_id), account=account_username),
            )
        return persona

    async def list_by_owner(self, account_username: str) -> Sequence[Persona]:
        """All personas of the account in insertion order."""
        result = await self.db.execute(
            select(Persona)
            .where(Persona.account_username == account_username)
            .order_by(Persona.created_at, Persona.id)
        )
        return result.scalars().all()

    # --- Helpers --------------------------------------------------------------

    async def _flush_or_conflict(self, handle: str, account_username: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(
                f"Handle '{handle}' lost a concurrent uniqueness race",
                extra={"account": account_username, "error_code": "HANDLE_CONFLICT"},
            )
            raise HandleConflictError(handle, ErrorContext(account=account_username))
