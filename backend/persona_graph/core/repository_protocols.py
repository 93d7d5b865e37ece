"""Boundary Protocols — contracts between the four graph components.

Invariants:
    - Dependency order, leaves first: registry <- follow graph, binder <- coordinator
    - Components depend on these Protocols, never on each other's concrete classes
    - Implementations provided by services/ via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO against the store
"""

from typing import Protocol, Sequence
from uuid import UUID


class PersonaLike(Protocol):
    """Structural contract for persona records handed across components."""
    id: UUID
    account_username: str
    handle: str
    name: str


class PersonaDirectory(Protocol):
    """Read/delete side of the persona registry used by the other components."""
    async def find_by_id(self, persona_id: UUID) -> PersonaLike | None: ...
    async def get_by_id(self, persona_id: UUID) -> PersonaLike: ...
    async def get_by_handle(self, handle: str) -> PersonaLike: ...
    async def get_by_owner_and_handle(
        self, account_username: str, handle: str,
    ) -> PersonaLike: ...
    async def list_by_owner(self, account_username: str) -> Sequence[PersonaLike]: ...
    async def delete(self, persona_id: UUID) -> None: ...
    async def delete_all_owned_by(self, account_username: str) -> int: ...


class EdgeCleaner(Protocol):
    """Edge removal contract used by the integrity coordinator."""
    async def delete_all_initiated_by(self, persona_id: UUID) -> int: ...
    async def delete_all_received_by(self, persona_id: UUID) -> int: ...
    async def delete_all_touching(self, persona_id: UUID) -> int: ...


class BindingCleaner(Protocol):
    """Session-binding cleanup contract used by the integrity coordinator."""
    async def clear_bindings_to(self, persona_ids: Sequence[UUID]) -> int: ...
    async def clear_account(self, account_username: str) -> int: ...

