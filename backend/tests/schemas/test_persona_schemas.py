"""Persona and follow schemas — request validation at the API boundary."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from persona_graph.schemas.follow import FollowCreate
from persona_graph.schemas.persona import PersonaCreate, PersonaUpdate, SignInRequest


def test_create_trims_handle():
    body = PersonaCreate(handle="  alice ", name="Alice A")
    assert body.handle == "alice"


@pytest.mark.parametrize("handle", ["bad handle", "a.b", "", "émile"])
def test_create_rejects_bad_handles(handle):
    with pytest.raises(ValidationError):
        PersonaCreate(handle=handle, name="Alice")


@pytest.mark.parametrize("name", ["Alice-Ann", "Alice  A", "", "One Two Three Four Five Six Seven"])
def test_create_rejects_bad_names(name):
    with pytest.raises(ValidationError):
        PersonaCreate(handle="alice", name=name)


def test_update_accepts_single_field():
    assert PersonaUpdate(name="Alice B").handle is None
    assert PersonaUpdate(handle="alicia").name is None


def test_update_requires_one_field():
    with pytest.raises(ValidationError):
        PersonaUpdate()


def test_update_validates_present_fields():
    with pytest.raises(ValidationError):
        PersonaUpdate(handle="no way")


def test_sign_in_validates_handle():
    assert SignInRequest(handle=" bob ").handle == "bob"
    with pytest.raises(ValidationError):
        SignInRequest(handle="not valid")


def test_follow_create_keeps_raw_id():
    raw = str(uuid4())
    assert FollowCreate(persona_id=raw).persona_id == raw
    assert FollowCreate(persona_id="not-a-uuid").persona_id == "not-a-uuid"
    with pytest.raises(ValidationError):
        FollowCreate(persona_id="")
