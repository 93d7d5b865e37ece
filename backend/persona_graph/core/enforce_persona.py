"""Persona Rule Enforcement — handle, name and edge-shape rules.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - check_* return the error instance on violation, None on success; callers raise
    - Handles are trimmed before validation and lookup; comparison is case-sensitive
    - \\w is ASCII-only: letters, digits, underscore

Design Decisions:
    - Same functions back the request schemas (fast-fail) and the services (source of truth)
    - Name word limit is a parameter, not a constant: it is a policy knob (config.py)
"""

import re
from uuid import UUID

from persona_graph.core.domain_types import (
    DEFAULT_NAME_MAX_WORDS, MAX_HANDLE_LENGTH, MAX_NAME_LENGTH,
)
from persona_graph.core.errors import InvalidFormatError, SelfFollowError

_HANDLE_RE = re.compile(r"\w+", re.ASCII)
_NAME_WORD_RE = re.compile(r"\w+", re.ASCII)


def normalize_handle(handle: str) -> str:
    """Trim surrounding whitespace; the result is the lookup key."""
    return handle.strip()


def check_handle_format(handle: str | None) -> InvalidFormatError | None:
    """Handle must be a nonempty alphanumeric/underscore token."""
    if not handle or not _HANDLE_RE.fullmatch(handle):
        return InvalidFormatError(
            "Handle must be a nonempty alphanumeric string. "
            "Spaces and hyphens are not allowed.",
            "handle",
        )
    if len(handle) > MAX_HANDLE_LENGTH:
        return InvalidFormatError(
            f"Handle must be at most {MAX_HANDLE_LENGTH} characters.", "handle",
        )
    return None


def check_name_format(
    name: str | None, max_words: int = DEFAULT_NAME_MAX_WORDS,
) -> InvalidFormatError | None:
    """Name is 1..max_words word groups separated by single spaces."""
    error = InvalidFormatError(
        "Name must be a nonempty alphanumeric string. Spaces are allowed "
        f"(max one space between two words, at most {max_words} words). "
        "Hyphens are not allowed, but underscores are.",
        "name",
    )
    if not name or len(name) > MAX_NAME_LENGTH:
        return error
    words = name.split(" ")
    if len(words) > max_words:
        return error
    if not all(_NAME_WORD_RE.fullmatch(word) for word in words):
        return error
    return None


def check_not_self_follow(follower_id: UUID, following_id: UUID) -> SelfFollowError | None:
    if follower_id == following_id:
        return SelfFollowError(str(follower_id))
    return None


def parse_persona_id(raw: str) -> UUID | None:
    """Parse a persona id string; None when it is not a well-formed id."""
    try:
        return UUID(str(raw))
    except (ValueError, AttributeError, TypeError):
        return None


# --- Composite validators -----------------------------------------------------

def validate_persona_fields(
    handle: str | None, name: str | None,
    max_words: int = DEFAULT_NAME_MAX_WORDS,
) -> InvalidFormatError | None:
    """Validate both fields for create; name is checked first, as on the wire."""
    return check_name_format(name, max_words) or check_handle_format(handle)


def validate_persona_update(
    handle: str | None, name: str | None,
    max_words: int = DEFAULT_NAME_MAX_WORDS,
) -> InvalidFormatError | None:
    """Validate only the fields present in a partial update."""
    return (
        (check_name_format(name, max_words) if name is not None else None)
        or (check_handle_format(handle) if handle is not None else None)
    )
