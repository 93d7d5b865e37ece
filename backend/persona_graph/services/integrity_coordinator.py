"""Referential-Integrity Coordinator — cascades deletion across personas, edges and bindings.

Invariants:
    - Edges are removed BEFORE the persona record: a crash in between leaves a
      persona with no edges, never edges pointing at a missing persona
    - Deleting the session's active persona is refused with no mutation
    - Deleting another account's persona is refused with no mutation
    - Account deletion bypasses the active-persona guard
    - Each step commits on its own; failures are aggregated into one CascadeError
      and completed steps are NOT rolled back
    - Re-running a cascade is safe: every step is "delete where id matches"

Design Decisions:
    - Explicit ordered steps instead of a cross-table transaction or FK cascades
      (ADR: store has no foreign keys; readers tolerate orphans)
    - No automatic retry: the caller decides, the whole cascade is idempotent
"""

import logging
from typing import Awaitable, Callable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from persona_graph.core.domain_types import ActorContext, CascadeStep
from persona_graph.core.errors import (
    ActivePersonaDeletionError, CascadeError, ErrorContext,
    OwnershipMismatchError, PersonaGraphError,
)
from persona_graph.core.repository_protocols import (
    BindingCleaner, EdgeCleaner, PersonaDirectory,
)

logger = logging.getLogger(__name__)

Step = tuple[str, Callable[[], Awaitable[object]]]


class ReferentialIntegrityCoordinator:
    """Ordered cleanup when a persona or a whole account goes away."""

    def __init__(
        self,
        db: AsyncSession,
        registry: PersonaDirectory,
        graph: EdgeCleaner,
        binder: BindingCleaner,
    ):
        self.db = db
        self.registry = registry
        self.graph = graph
        self.binder = binder

    async def delete_persona(self, persona_id: UUID, actor: ActorContext) -> None:
        """Delete one persona of the acting account with its edges and bindings.

        A persona that is already gone only gets the edge and binding steps, so a
        cascade that failed after removing the record can be re-run to completion.
        """
        persona = await self.registry.find_by_id(persona_id)
        if persona is None:
            await self._run_steps(f"persona {persona_id}", [
                (CascadeStep.EDGES.value, lambda: self.graph.delete_all_touching(persona_id)),
                (CascadeStep.BINDINGS.value, lambda: self.binder.clear_bindings_to([persona_id])),
            ], account=actor.account_username)
            logger.info(
                "Persona already absent, leftover edges and bindings cleared",
                extra={"persona_id": persona_id, "account": actor.account_username},
            )
            return
        handle = persona.handle
        ctx = ErrorContext(persona_id=str(persona_id), account=actor.account_username)
        if persona.account_username != actor.account_username:
            raise OwnershipMismatchError(handle, actor.account_username, ctx)
        if actor.active_persona_id == persona.id:
            logger.warning(
                "Refused to delete the active persona",
                extra={
                    "persona_id": persona_id,
                    "error_code": "ACTIVE_PERSONA_DELETION",
                },
            )
            raise ActivePersonaDeletionError(str(persona_id), ctx)

        await self._run_steps(f"persona {persona_id}", [
            (CascadeStep.EDGES.value, lambda: self.graph.delete_all_touching(persona_id)),
            (CascadeStep.PERSONA.value, lambda: self.registry.delete(persona_id)),
            (CascadeStep.BINDINGS.value, lambda: self.binder.clear_bindings_to([persona_id])),
        ], account=actor.account_username)
        logger.info(
            f"Persona @{handle} deleted with cascade",
            extra={"persona_id": persona_id, "account": actor.account_username},
        )

    async def delete_account(self, account_username: str) -> None:
        """Delete every persona of the account, their edges, and the account's bindings."""
        # Plain tuples: a failed step rolls back and expires loaded records
        personas = [
            (p.id, p.handle) for p in await self.registry.list_by_owner(account_username)
        ]
        subject = f"account {account_username}"
        completed: list[str] = []
        failures: dict[str, str] = {}

        for persona_id, handle in personas:
            step = f"{CascadeStep.EDGES.value}:{handle}"
            cleanup = lambda pid=persona_id: self.graph.delete_all_touching(pid)  # noqa: E731
            if await self._attempt(step, cleanup, failures):
                completed.append(step)

        if failures:
            # Persona batch is skipped so no persona disappears while its edges linger
            self._raise_cascade(subject, completed, failures, account_username)

        await self._run_steps(subject, [
            (CascadeStep.PERSONAS.value, lambda: self.registry.delete_all_owned_by(account_username)),
            (CascadeStep.BINDINGS.value, lambda: self.binder.clear_account(account_username)),
        ], completed=completed, account=account_username)
        logger.info(
            f"Account deleted with {len(personas)} persona(s)",
            extra={"account": account_username},
        )

    # --- Helpers --------------------------------------------------------------

    async def _run_steps(
        self,
        subject: str,
        steps: list[Step],
        completed: list[str] | None = None,
        account: str | None = None,
    ) -> None:
        """Run steps in order, stopping at the first failure."""
        completed = completed if completed is not None else []
        failures: dict[str, str] = {}
        for name, action in steps:
            if not await self._attempt(name, action, failures):
                self._raise_cascade(subject, completed, failures, account)
            completed.append(name)

    async def _attempt(
        self, name: str, action: Callable[[], Awaitable[object]], failures: dict[str, str],
    ) -> bool:
        try:
            await action()
        except (PersonaGraphError, SQLAlchemyError) as e:
            await self.db.rollback()
            logger.error(
                f"Cascade step failed: {e}",
                extra={"step": name, "error_code": "CASCADE_FAILED"},
            )
            failures[name] = str(e)
            return False
        return True

    @staticmethod
    def _raise_cascade(
        subject: str, completed: list[str], failures: dict[str, str], account: str | None,
    ) -> None:
        raise CascadeError(
            subject, list(completed), dict(failures),
            ErrorContext(account=account, debug_info={"completed": list(completed)}),
        )
