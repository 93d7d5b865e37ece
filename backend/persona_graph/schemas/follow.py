"""Follow Schemas — follow requests and edge responses.

Invariants:
    - FollowCreate names only the target; the follower is always the active persona
    - Edge lists are newest-first (ordering comes from the store)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class FollowCreate(BaseModel):
    """Follow the persona with this id as the active persona.

    Raw string; the route resolves malformed ids to 404, same as unknown ids.
    """
    persona_id: str = Field(min_length=1)


class FollowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    follower_id: UUID
    following_id: UUID
    followed_at: datetime


class FollowOverview(BaseModel):
    """Both directions of one persona's edges."""
    persona_id: UUID
    following: list[FollowResponse]
    followers: list[FollowResponse]


class UnfollowAllResponse(BaseModel):
    message: str
    removed: int
