"""Persona Registry — handle uniqueness, format rules, lookups and updates.

Invariants:
    - Second create with the same handle fails with HandleConflictError, either order
    - Handles are case-sensitive: 'Alice' and 'alice' coexist
    - Update re-checks uniqueness excluding the persona itself
    - A race past the pre-check is still caught by the UNIQUE constraint
"""

from uuid import uuid4

import pytest

from persona_graph.core.errors import (
    HandleConflictError, InvalidFormatError, OwnershipMismatchError,
    ResourceNotFoundError,
)
from persona_graph.models.persona import Persona
from persona_graph.services.persona_registry import PersonaRegistry


async def test_create_returns_persisted_persona(registry):
    persona = await registry.create("ann", "alice", "Alice A")
    assert persona.id is not None
    assert persona.account_username == "ann"
    fetched = await registry.get_by_id(persona.id)
    assert fetched.handle == "alice"
    assert fetched.name == "Alice A"


async def test_duplicate_handle_conflicts_regardless_of_account(registry):
    await registry.create("ann", "alice", "Alice A")
    with pytest.raises(HandleConflictError):
        await registry.create("ben", "alice", "Other Alice")


async def test_handles_are_case_sensitive(registry):
    upper = await registry.create("ann", "Alice", "Alice Upper")
    lower = await registry.create("ben", "alice", "Alice Lower")
    assert upper.id != lower.id
    with pytest.raises(HandleConflictError):
        await registry.create("ben", "alice", "Alice Again")


async def test_handle_with_space_is_invalid(registry):
    with pytest.raises(InvalidFormatError) as exc:
        await registry.create("ann", "bad handle", "Alice A")
    assert exc.value.field == "handle"


async def test_bad_name_is_invalid(registry):
    with pytest.raises(InvalidFormatError) as exc:
        await registry.create("ann", "alice", "Alice-Ann")
    assert exc.value.field == "name"


async def test_handle_is_trimmed_before_storage_and_lookup(registry):
    persona = await registry.create("ann", "  alice ", "Alice A")
    assert persona.handle == "alice"
    assert (await registry.get_by_handle(" alice")).id == persona.id


async def test_handle_lookup_is_exact_not_prefix(registry):
    await registry.create("ann", "alice", "Alice A")
    assert await registry.find_by_handle("ali") is None
    assert await registry.find_by_handle("alice2") is None
    with pytest.raises(ResourceNotFoundError):
        await registry.get_by_handle("ALICE")


async def test_name_word_limit_follows_registry_policy(test_db):
    strict = PersonaRegistry(test_db, name_max_words=2)
    with pytest.raises(InvalidFormatError):
        await strict.create("ann", "alice", "Alice Ann Adams")


async def test_get_by_id_missing_raises_not_found(registry):
    with pytest.raises(ResourceNotFoundError):
        await registry.get_by_id(uuid4())


async def test_list_by_owner_only_returns_that_account(registry, alice, bob, carol):
    personas = await registry.list_by_owner("ann")
    assert {p.handle for p in personas} == {"alice", "carol"}
    assert await registry.list_by_owner("nobody") == []


async def test_get_by_owner_and_handle_checks_owner(registry, alice, bob):
    assert (await registry.get_by_owner_and_handle("ann", "alice")).id == alice.id
    with pytest.raises(ResourceNotFoundError):
        await registry.get_by_owner_and_handle("ann", "bob")


async def test_get_owned_rejects_other_account(registry, alice):
    with pytest.raises(OwnershipMismatchError):
        await registry.get_owned(alice.id, "ben")
    assert (await registry.get_owned(alice.id, "ann")).id == alice.id


async def test_update_name_only(registry, alice):
    updated = await registry.update(alice.id, name="Alice B")
    assert updated.name == "Alice B"
    assert updated.handle == "alice"


async def test_update_to_own_handle_is_not_a_conflict(registry, alice):
    updated = await registry.update(alice.id, handle="alice", name="Alice Z")
    assert updated.handle == "alice"


async def test_update_to_taken_handle_conflicts(registry, alice, bob):
    with pytest.raises(HandleConflictError):
        await registry.update(alice.id, handle="bob")
    assert (await registry.get_by_id(alice.id)).handle == "alice"


async def test_update_frees_old_handle(registry, alice):
    await registry.update(alice.id, handle="alicia")
    assert await registry.find_by_handle("alice") is None
    again = await registry.create("ben", "alice", "New Alice")
    assert again.id != alice.id


async def test_update_validates_format(registry, alice):
    with pytest.raises(InvalidFormatError):
        await registry.update(alice.id, handle="no way")


async def test_update_missing_persona_raises_not_found(registry):
    with pytest.raises(ResourceNotFoundError):
        await registry.update(uuid4(), name="Ghost")


async def test_delete_is_idempotent(registry, alice):
    await registry.delete(alice.id)
    assert await registry.find_by_id(alice.id) is None
    await registry.delete(alice.id)


async def test_delete_all_owned_by_counts(registry, alice, bob, carol):
    assert await registry.delete_all_owned_by("ann") == 2
    assert await registry.find_by_id(bob.id) is not None


async def test_store_constraint_catches_race_past_precheck(registry, test_db, monkeypatch):
    """Two creates both pass the read check; the UNIQUE constraint decides."""
    test_db.add(Persona(account_username="ben", handle="alice", name="First"))
    await test_db.commit()

    async def _stale_read(handle):
        return None

    monkeypatch.setattr(registry, "find_by_handle", _stale_read)
    with pytest.raises(HandleConflictError):
        await registry.create("ann", "alice", "Second")
