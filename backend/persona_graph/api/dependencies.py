"""Request Dependencies — per-request service wiring and actor resolution.

Invariants:
    - One AsyncSession per request, shared by every service built for it
    - ActorContext is resolved once per request from the identity headers
    - Missing identity headers -> UnauthenticatedError (403), never a default actor

Design Decisions:
    - Services constructed per request with the shared session, like handlers per
      dispatch; FastAPI caches each dependency within a request
    - Identity headers are set by the upstream auth layer; their names are config
"""

from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from persona_graph.config import get_settings
from persona_graph.core.domain_types import ActorContext
from persona_graph.core.enforce_persona import parse_persona_id
from persona_graph.core.errors import ResourceNotFoundError
from persona_graph.infrastructure.database import get_db
from persona_graph.services.active_persona import ActivePersonaBinder
from persona_graph.services.follow_graph import FollowGraphStore
from persona_graph.services.integrity_coordinator import ReferentialIntegrityCoordinator
from persona_graph.services.persona_registry import PersonaRegistry


def get_registry(db: AsyncSession = Depends(get_db)) -> PersonaRegistry:
    return PersonaRegistry(db, get_settings().persona_name_max_words)


def get_follow_graph(
    db: AsyncSession = Depends(get_db),
    registry: PersonaRegistry = Depends(get_registry),
) -> FollowGraphStore:
    return FollowGraphStore(db, registry)


def get_binder(
    db: AsyncSession = Depends(get_db),
    registry: PersonaRegistry = Depends(get_registry),
) -> ActivePersonaBinder:
    return ActivePersonaBinder(db, registry)


def get_coordinator(
    db: AsyncSession = Depends(get_db),
    registry: PersonaRegistry = Depends(get_registry),
    graph: FollowGraphStore = Depends(get_follow_graph),
    binder: ActivePersonaBinder = Depends(get_binder),
) -> ReferentialIntegrityCoordinator:
    return ReferentialIntegrityCoordinator(db, registry, graph, binder)


async def get_actor(
    request: Request,
    binder: ActivePersonaBinder = Depends(get_binder),
) -> ActorContext:
    """Authenticated account + session + active persona for this request."""
    settings = get_settings()
    account = request.headers.get(settings.account_header, "").strip()
    session_key = request.headers.get(settings.session_header, "").strip()
    return await binder.load_actor(session_key, account)


def require_persona_id(raw: str) -> UUID:
    """Persona id from a path/query string; malformed ids are simply not found."""
    persona_id = parse_persona_id(raw)
    if persona_id is None:
        raise ResourceNotFoundError("Persona", raw)
    return persona_id
