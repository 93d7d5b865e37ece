"""Persona Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - PersonaCreate.handle / name: same rules as the registry, run as a fast-fail
    - PersonaUpdate carries at least one field; account is never updatable
    - Responses never expose internal timestamps

Design Decisions:
    - field_validator delegates to core checks and re-raises as ValueError so
      Pydantic reports the field; the registry still re-checks (source of truth)
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from persona_graph.config import get_settings
from persona_graph.core.enforce_persona import (
    check_handle_format, check_name_format, normalize_handle,
)


def _validated_handle(v: str) -> str:
    v = normalize_handle(v)
    error = check_handle_format(v)
    if error:
        raise ValueError(error.message)
    return v


def _validated_name(v: str) -> str:
    error = check_name_format(v, get_settings().persona_name_max_words)
    if error:
        raise ValueError(error.message)
    return v


class PersonaCreate(BaseModel):
    """Persona creation — handle and display name."""
    handle: str
    name: str

    @field_validator("handle")
    @classmethod
    def check_handle(cls, v: str) -> str:
        return _validated_handle(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _validated_name(v)


class PersonaUpdate(BaseModel):
    """Partial persona update — name and/or handle."""
    name: str | None = None
    handle: str | None = None

    @field_validator("handle")
    @classmethod
    def check_handle(cls, v: str | None) -> str | None:
        return None if v is None else _validated_handle(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        return None if v is None else _validated_name(v)

    @model_validator(mode="after")
    def require_one_field(self) -> "PersonaUpdate":
        if self.name is None and self.handle is None:
            raise ValueError("Provide a new name, a new handle, or both")
        return self


class SignInRequest(BaseModel):
    """Sign in as (or switch to) one of the account's personas."""
    handle: str

    @field_validator("handle")
    @classmethod
    def check_handle(cls, v: str) -> str:
        return _validated_handle(v)


class PersonaResponse(BaseModel):
    """Persona response — public-facing persona data."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    account_username: str
    handle: str
    name: str


class PersonaEnvelope(BaseModel):
    """Mutation result — human message plus the persona."""
    message: str
    persona: PersonaResponse


class PersonaList(BaseModel):
    """Personas of one account."""
    account: str
    personas: list[PersonaResponse]


class MessageResponse(BaseModel):
    message: str
