"""Persona Routes — create, read, update and delete personas of the calling account.

Invariants:
    - Every route requires an authenticated account (identity headers)
    - Only the owner may update or delete a persona
    - Deleting a persona always goes through the integrity coordinator (edges first)
    - Format rules run twice: request schema (fast-fail) and registry (source of truth)

Design Decisions:
    - Persona ids taken as strings and parsed here: a malformed id is a 404,
      not a validation error (same outcome as an unknown id)
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from persona_graph.api.dependencies import (
    get_actor, get_coordinator, get_registry, require_persona_id,
)
from persona_graph.core.domain_types import ActorContext
from persona_graph.schemas.persona import (
    MessageResponse, PersonaCreate, PersonaEnvelope, PersonaList,
    PersonaResponse, PersonaUpdate,
)
from persona_graph.services.integrity_coordinator import ReferentialIntegrityCoordinator
from persona_graph.services.persona_registry import PersonaRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/personas", tags=["personas"])


@router.post(
    "", response_model=PersonaEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_persona(
    body: PersonaCreate,
    actor: ActorContext = Depends(get_actor),
    registry: PersonaRegistry = Depends(get_registry),
):
    """Create a persona owned by the calling account."""
    persona = await registry.create(actor.account_username, body.handle, body.name)
    return PersonaEnvelope(
        message=f"Your persona was created successfully as @{persona.handle}.",
        persona=PersonaResponse.model_validate(persona),
    )


@router.get("", response_model=PersonaList)
async def list_personas(
    author: str | None = Query(None, min_length=1),
    actor: ActorContext = Depends(get_actor),
    registry: PersonaRegistry = Depends(get_registry),
):
    """Personas of the calling account, or of ?author=username."""
    account = author or actor.account_username
    personas = await registry.list_by_owner(account)
    return PersonaList(
        account=account,
        personas=[PersonaResponse.model_validate(p) for p in personas],
    )


@router.get("/handle/{handle}", response_model=PersonaResponse)
async def get_persona_by_handle(
    handle: str,
    actor: ActorContext = Depends(get_actor),
    registry: PersonaRegistry = Depends(get_registry),
):
    return PersonaResponse.model_validate(await registry.get_by_handle(handle))


@router.get("/{persona_id}", response_model=PersonaResponse)
async def get_persona(
    persona_id: str,
    actor: ActorContext = Depends(get_actor),
    registry: PersonaRegistry = Depends(get_registry),
):
    persona = await registry.get_by_id(require_persona_id(persona_id))
    return PersonaResponse.model_validate(persona)


@router.put("/{persona_id}", response_model=PersonaEnvelope)
async def update_persona(
    persona_id: str,
    body: PersonaUpdate,
    actor: ActorContext = Depends(get_actor),
    registry: PersonaRegistry = Depends(get_registry),
):
    """Update name and/or handle of one of the caller's personas."""
    owned = await registry.get_owned(require_persona_id(persona_id), actor.account_username)
    persona = await registry.update(owned.id, name=body.name, handle=body.handle)
    return PersonaEnvelope(
        message="Your persona was updated successfully.",
        persona=PersonaResponse.model_validate(persona),
    )


@router.delete("/{persona_id}", response_model=MessageResponse)
async def delete_persona(
    persona_id: str,
    actor: ActorContext = Depends(get_actor),
    coordinator: ReferentialIntegrityCoordinator = Depends(get_coordinator),
):
    """Delete a persona and every follow edge touching it. Refused for the active persona."""
    await coordinator.delete_persona(require_persona_id(persona_id), actor)
    return MessageResponse(message="Your persona has been deleted successfully.")
