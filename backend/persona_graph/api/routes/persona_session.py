"""Persona Session Routes — sign in as, inspect, and sign out of the active persona.

Invariants:
    - Sign-in only succeeds for a persona owned by the calling account
    - GET reports Stale (403) when the bound persona was deleted elsewhere

Design Decisions:
    - One resource, three verbs: POST binds (also used to switch), DELETE clears
"""

import logging

from fastapi import APIRouter, Depends

from persona_graph.api.dependencies import get_actor, get_binder
from persona_graph.core.domain_types import ActorContext
from persona_graph.schemas.persona import (
    MessageResponse, PersonaEnvelope, PersonaResponse, SignInRequest,
)
from persona_graph.services.active_persona import ActivePersonaBinder

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/persona-session", tags=["persona-session"])


@router.post("", response_model=PersonaEnvelope)
async def sign_in_persona(
    body: SignInRequest,
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
):
    """Sign in as a persona, or switch the active persona."""
    persona = await binder.sign_in(actor, body.handle)
    return PersonaEnvelope(
        message=f"You have logged in successfully as persona @{persona.handle}",
        persona=PersonaResponse.model_validate(persona),
    )


@router.get("", response_model=PersonaResponse)
async def get_active_persona(
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
):
    return PersonaResponse.model_validate(await binder.current_persona(actor))


@router.delete("", response_model=MessageResponse)
async def sign_out_persona(
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
):
    await binder.clear(actor.session_key)
    return MessageResponse(message="You have signed out of the active persona.")
