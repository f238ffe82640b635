"""Error Hierarchy — typed, categorized exceptions for every collaboration failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are definitive outcomes; the engine never retries them
    - to_response() produces the REST envelope, always carrying the taxonomy code
    - DuplicateActiveRequestError always names the conflicting request id
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with CollabError base: one FastAPI handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = None
    actor_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class CollabError(Exception):
    """Base exception for all collaboration service errors."""

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

    def details(self) -> dict[str, Any]:
        """Error-specific payload merged into the response envelope."""
        return {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.context.user_message or self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "request_id": self.context.request_id,
                "actor_id": self.context.actor_id,
            },
        }
        body.update(self.details())
        return {"error": body}


# ─── Domain Errors (4xx) ────────────────────────────────────────

class PayloadValidationError(CollabError):
    """Malformed or missing payload field — recoverable client-side."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field

    def details(self) -> dict[str, Any]:
        return {"details": [{"field": self.field, "message": self.message}]}


class AuthenticationRequiredError(CollabError):
    """No authenticated actor was supplied by the identity gateway."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authenticated actor required", "AUTHENTICATION_REQUIRED",
            ErrorCategory.AUTHORIZATION, ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(CollabError):
    """Actor is not allowed to act on this resource."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(CollabError):
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


class InvalidTransitionError(CollabError):
    """Legal call on a request in the wrong state (including a lost CAS race)."""
    def __init__(
        self,
        current_status: str,
        target_status: str,
        operation: str | None = None,
        context: ErrorContext | None = None,
    ):
        if operation:
            message = f"Cannot {operation} a request in status '{current_status}'"
        else:
            message = f"Cannot move request from '{current_status}' to '{target_status}'"
        super().__init__(
            message,
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )
        self.current_status = current_status
        self.target_status = target_status

    def details(self) -> dict[str, Any]:
        return {
            "current_status": self.current_status,
            "target_status": self.target_status,
        }


class DuplicateActiveRequestError(CollabError):
    """An active request already exists for this (brand, creator) pair."""
    def __init__(
        self, conflicting_request_id: str | None, context: ErrorContext | None = None,
    ):
        super().__init__(
            "An active collaboration request already exists for this creator"
            + (f" ({conflicting_request_id})" if conflicting_request_id else ""),
            "DUPLICATE_ACTIVE_REQUEST", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.conflicting_request_id = conflicting_request_id

    def details(self) -> dict[str, Any]:
        return {"conflicting_request_id": self.conflicting_request_id}


class ConcurrencyError(CollabError):
    """Store compare-and-swap failed and was not otherwise classified."""
    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.current_status = current_status

    def details(self) -> dict[str, Any]:
        return {"current_status": self.current_status}


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class DatabaseError(CollabError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
