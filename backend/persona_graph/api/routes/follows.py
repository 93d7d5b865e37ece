"""Follow Routes — follow, unfollow and traverse the graph as the active persona.

Invariants:
    - Every route requires an active persona; the follower side is always that persona
    - The target of a follow must exist at write time (checked here, not by the store)
    - Unfollow only ever touches edges the active persona initiated

Design Decisions:
    - Overview (GET "") returns both directions in one call, like the profile view needs
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from persona_graph.api.dependencies import (
    get_actor, get_binder, get_follow_graph, get_registry, require_persona_id,
)
from persona_graph.core.domain_types import ActorContext
from persona_graph.schemas.follow import (
    FollowCreate, FollowOverview, FollowResponse, UnfollowAllResponse,
)
from persona_graph.schemas.persona import MessageResponse
from persona_graph.services.active_persona import ActivePersonaBinder
from persona_graph.services.follow_graph import FollowGraphStore
from persona_graph.services.persona_registry import PersonaRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/follows", tags=["follows"])


async def _overview(graph: FollowGraphStore, persona_id) -> FollowOverview:
    following = await graph.list_following(persona_id)
    followers = await graph.list_followers(persona_id)
    return FollowOverview(
        persona_id=persona_id,
        following=[FollowResponse.model_validate(f) for f in following],
        followers=[FollowResponse.model_validate(f) for f in followers],
    )


@router.get("", response_model=FollowOverview)
async def get_follow_overview(
    persona_id: str | None = Query(None),
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
    registry: PersonaRegistry = Depends(get_registry),
    graph: FollowGraphStore = Depends(get_follow_graph),
):
    """Following and followers of the active persona, or of ?persona_id=."""
    me = await binder.current_persona(actor)
    if persona_id is None:
        return await _overview(graph, me.id)
    target = await registry.get_by_id(require_persona_id(persona_id))
    return await _overview(graph, target.id)


@router.get("/following", response_model=list[FollowResponse])
async def list_following(
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
    graph: FollowGraphStore = Depends(get_follow_graph),
):
    me = await binder.current_persona(actor)
    return [FollowResponse.model_validate(f) for f in await graph.list_following(me.id)]


@router.get("/followers", response_model=list[FollowResponse])
async def list_followers(
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
    graph: FollowGraphStore = Depends(get_follow_graph),
):
    me = await binder.current_persona(actor)
    return [FollowResponse.model_validate(f) for f in await graph.list_followers(me.id)]


@router.get("/handle/{handle}", response_model=FollowOverview)
async def get_follow_overview_by_handle(
    handle: str,
    actor: ActorContext = Depends(get_actor),
    registry: PersonaRegistry = Depends(get_registry),
    graph: FollowGraphStore = Depends(get_follow_graph),
):
    persona = await registry.get_by_handle(handle)
    following = await graph.list_following_by_handle(handle)
    followers = await graph.list_followers_by_handle(handle)
    return FollowOverview(
        persona_id=persona.id,
        following=[FollowResponse.model_validate(f) for f in following],
        followers=[FollowResponse.model_validate(f) for f in followers],
    )


@router.post(
    "", response_model=FollowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def follow_persona(
    body: FollowCreate,
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
    registry: PersonaRegistry = Depends(get_registry),
    graph: FollowGraphStore = Depends(get_follow_graph),
):
    """Follow an existing persona as the active persona."""
    me = await binder.current_persona(actor)
    target = await registry.get_by_id(require_persona_id(body.persona_id))
    edge = await graph.follow(me.id, target.id)
    return FollowResponse.model_validate(edge)


@router.delete("", response_model=MessageResponse)
async def unfollow_persona(
    persona_id: str = Query(..., min_length=1),
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
    registry: PersonaRegistry = Depends(get_registry),
    graph: FollowGraphStore = Depends(get_follow_graph),
):
    me = await binder.current_persona(actor)
    target = await registry.get_by_id(require_persona_id(persona_id))
    await graph.unfollow(me.id, target.id)
    return MessageResponse(message=f"You unfollowed @{target.handle}.")


@router.delete("/all", response_model=UnfollowAllResponse)
async def unfollow_everyone(
    actor: ActorContext = Depends(get_actor),
    binder: ActivePersonaBinder = Depends(get_binder),
    graph: FollowGraphStore = Depends(get_follow_graph),
):
    me = await binder.current_persona(actor)
    removed = await graph.delete_all_initiated_by(me.id)
    return UnfollowAllResponse(message="You unfollowed everyone.", removed=removed)
