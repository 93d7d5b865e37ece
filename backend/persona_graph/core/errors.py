"""Error Hierarchy — typed, categorized exceptions for every persona-graph failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error carries the HTTP status the API layer answers with
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PersonaGraphError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - ConflictError / ForbiddenError are intermediate bases so callers can catch a
      whole kind (any uniqueness violation, any refusal) without listing subclasses
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    persona_id: str | None = None
    account: str | None = None
    session_key: str | None = None
    debug_info: dict[str, Any] | None = None


class PersonaGraphError(Exception):
    """Base exception for all persona-graph errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "persona_id": self.context.persona_id,
                    "account": self.context.account,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidFormatError(PersonaGraphError):
    """Input failed a format rule (handle, name, identifier)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_FORMAT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class ConflictError(PersonaGraphError):
    """Uniqueness violation — base for handle and follow-edge conflicts."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class HandleConflictError(ConflictError):
    """Another persona already owns this handle."""
    def __init__(self, handle: str, context: ErrorContext | None = None):
        super().__init__(
            f"A persona with handle '{handle}' already exists.",
            "HANDLE_CONFLICT", context,
        )
        self.handle = handle


class FollowAlreadyExistsError(ConflictError):
    """The ordered (follower, following) edge is already present."""
    def __init__(self, follower_id: str, following_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Persona '{follower_id}' already follows persona '{following_id}'.",
            "FOLLOW_ALREADY_EXISTS", context,
        )
        self.follower_id = follower_id
        self.following_id = following_id


class SelfFollowError(PersonaGraphError):
    """A persona tried to follow itself."""
    def __init__(self, persona_id: str, context: ErrorContext | None = None):
        super().__init__(
            "A persona cannot follow itself.",
            "SELF_FOLLOW", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.persona_id = persona_id


class ResourceNotFoundError(PersonaGraphError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ForbiddenError(PersonaGraphError):
    """Action not permitted for the current actor or state."""
    def __init__(
        self,
        message: str,
        code: str = "FORBIDDEN",
        context: ErrorContext | None = None,
        http_status: int = 403,
    ):
        super().__init__(
            message, code, ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, context, http_status,
        )


class OwnershipMismatchError(ForbiddenError):
    """Persona exists but belongs to a different account."""
    def __init__(self, handle: str, account: str, context: ErrorContext | None = None):
        super().__init__(
            f"Persona '{handle}' is not associated with account '{account}'.",
            "OWNERSHIP_MISMATCH", context, 400,
        )


class ActivePersonaDeletionError(ForbiddenError):
    """Deleting the persona that is currently active for the session."""
    def __init__(self, persona_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Cannot delete the currently signed in persona. Switch to a different "
            "persona or sign out of it before deleting it.",
            "ACTIVE_PERSONA_DELETION", context, 401,
        )
        self.persona_id = persona_id


class UnauthenticatedError(PersonaGraphError):
    """No authenticated account or no active persona for the session."""
    def __init__(
        self,
        message: str = "You must be signed in with an active persona to complete this action.",
        code: str = "UNAUTHENTICATED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 403,
        )


class StalePersonaError(UnauthenticatedError):
    """The session is bound to a persona that no longer exists."""
    def __init__(self, persona_id: str, context: ErrorContext | None = None):
        super().__init__(
            "The active persona no longer exists. Sign in with another persona.",
            "STALE_PERSONA", context,
        )
        self.persona_id = persona_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class CascadeError(PersonaGraphError):
    """One or more cascade steps failed; completed steps are not rolled back."""
    def __init__(
        self,
        subject: str,
        completed: list[str],
        failures: dict[str, str],
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cascade for {subject} failed at: {', '.join(failures)}",
            "CASCADE_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.subject = subject
        self.completed = completed
        self.failures = failures


class DatabaseError(PersonaGraphError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
