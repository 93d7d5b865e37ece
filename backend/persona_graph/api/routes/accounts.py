"""Account Routes — account-level teardown of the persona graph.

Invariants:
    - An account can only delete its own persona graph
    - Deletion bypasses the active-persona guard (whole-account deletion wins)

Design Decisions:
    - Accounts themselves live in the upstream identity service; this removes
      everything this service stores for them
"""

import logging

from fastapi import APIRouter, Depends

from persona_graph.api.dependencies import get_actor, get_coordinator
from persona_graph.core.domain_types import ActorContext
from persona_graph.core.errors import ErrorContext, ForbiddenError
from persona_graph.schemas.persona import MessageResponse
from persona_graph.services.integrity_coordinator import ReferentialIntegrityCoordinator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/accounts", tags=["accounts"])


@router.delete("/{username}", response_model=MessageResponse)
async def delete_account_graph(
    username: str,
    actor: ActorContext = Depends(get_actor),
    coordinator: ReferentialIntegrityCoordinator = Depends(get_coordinator),
):
    """Delete every persona of the account and every edge touching them."""
    if actor.account_username != username:
        raise ForbiddenError(
            "You can only delete your own account.",
            context=ErrorContext(account=actor.account_username),
        )
    await coordinator.delete_account(username)
    return MessageResponse(message=f"All personas of {username} have been deleted.")
