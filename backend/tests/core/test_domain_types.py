"""Domain type tests — ActorContext immutability and helpers."""

from dataclasses import FrozenInstanceError
from uuid import uuid4

import pytest

from persona_graph.core.domain_types import ActorContext, CascadeStep


def test_actor_without_persona():
    actor = ActorContext(account_username="ann", session_key="s1")
    assert not actor.has_active_persona


def test_actor_with_persona():
    pid = uuid4()
    actor = ActorContext(account_username="ann", session_key="s1", active_persona_id=pid)
    assert actor.has_active_persona
    assert actor.active_persona_id == pid


def test_actor_is_frozen():
    actor = ActorContext(account_username="ann", session_key="s1")
    with pytest.raises(FrozenInstanceError):
        actor.account_username = "ben"


def test_cascade_steps_are_strings():
    assert CascadeStep.EDGES == "edges"
