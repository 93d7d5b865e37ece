"""Persona rule tests — pure tests for handle, name and edge-shape rules.

Tests cover:
    - check_handle_format: alphanumeric/underscore only, nonempty, case preserved
    - check_name_format: word groups, single spaces, configurable word limit
    - check_not_self_follow
    - parse_persona_id
    - Composite validators: validate_persona_fields, validate_persona_update
"""

from uuid import uuid4

import pytest

from persona_graph.core.enforce_persona import (
    check_handle_format,
    check_name_format,
    check_not_self_follow,
    normalize_handle,
    parse_persona_id,
    validate_persona_fields,
    validate_persona_update,
)
from persona_graph.core.errors import InvalidFormatError, SelfFollowError


# --- check_handle_format ------------------------------------------------------

@pytest.mark.parametrize("handle", ["alice", "Alice", "a", "bob_99", "_", "X1_y2"])
def test_handle_accepts_word_tokens(handle):
    assert check_handle_format(handle) is None


@pytest.mark.parametrize(
    "handle", ["", "bad handle", "bad-handle", "al!ce", "émile", "a.b", None],
)
def test_handle_rejects_non_word_tokens(handle):
    error = check_handle_format(handle)
    assert isinstance(error, InvalidFormatError)
    assert error.field == "handle"
    assert error.http_status == 400


def test_handle_rejects_overlong():
    assert check_handle_format("a" * 65) is not None
    assert check_handle_format("a" * 64) is None


def test_normalize_handle_trims_only():
    assert normalize_handle("  Alice \n") == "Alice"


# --- check_name_format --------------------------------------------------------

@pytest.mark.parametrize(
    "name", ["Alice A", "Bob", "J", "a b c d e f", "snake_case name"],
)
def test_name_accepts_up_to_six_groups(name):
    assert check_name_format(name) is None


@pytest.mark.parametrize(
    "name",
    ["", " ", "Alice  A", " Alice", "Alice ", "a b c d e f g", "Jean-Luc", "A.B"],
)
def test_name_rejects_bad_shapes(name):
    error = check_name_format(name)
    assert error is not None
    assert error.field == "name"


def test_name_word_limit_is_configurable():
    assert check_name_format("a b c", max_words=2) is not None
    assert check_name_format("a b", max_words=2) is None


# --- check_not_self_follow ----------------------------------------------------

def test_self_follow_rejected():
    pid = uuid4()
    error = check_not_self_follow(pid, pid)
    assert isinstance(error, SelfFollowError)
    assert error.code == "SELF_FOLLOW"


def test_distinct_personas_pass():
    assert check_not_self_follow(uuid4(), uuid4()) is None


# --- parse_persona_id ---------------------------------------------------------

def test_parse_persona_id_round_trips_uuid_string():
    pid = uuid4()
    assert parse_persona_id(str(pid)) == pid


@pytest.mark.parametrize("raw", ["", "not-an-id", "1234"])
def test_parse_persona_id_rejects_garbage(raw):
    assert parse_persona_id(raw) is None


# --- Composite validators -----------------------------------------------------

def test_create_reports_name_before_handle():
    error = validate_persona_fields("bad handle", "bad--name")
    assert error.field == "name"


def test_create_passes_with_valid_fields():
    assert validate_persona_fields("alice", "Alice A") is None


def test_update_ignores_absent_fields():
    assert validate_persona_update(None, None) is None
    assert validate_persona_update("new_handle", None) is None


def test_update_checks_present_fields():
    assert validate_persona_update("bad handle", None).field == "handle"
    assert validate_persona_update(None, "  ").field == "name"
