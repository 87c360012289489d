"""Error Hierarchy — typed, categorized exceptions for all marketplace failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; backend errors (500-level) are critical
    - PartialFailureError is never folded into another error: the listing was already written
    - to_response() produces a uniform envelope for whatever surface reports the error

Design Decisions:
    - Single hierarchy with FarmLinkError base: callers catch one type and branch on code
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
    BACKEND = "backend"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    CONFLICT = "conflict"
    RECONCILIATION = "reconciliation"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    order_id: str | None = None
    listing_id: str | None = None
    profile_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class FarmLinkError(Exception):
    """Base exception for all marketplace errors."""

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

    @property
    def recoverable(self) -> bool:
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING, ErrorSeverity.ERROR)

    def to_response(self) -> dict:
        """Convert to standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "order_id": self.context.order_id,
                    "listing_id": self.context.listing_id,
                    "profile_id": self.context.profile_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(FarmLinkError):
    """Caller-supplied input is malformed."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(FarmLinkError):
    """Referenced listing, order or profile does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class NoLongerAvailableError(FarmLinkError):
    """Listing changed state since the client last saw it."""
    def __init__(self, listing_id: str, status: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.listing_id = listing_id
        ctx.user_message = ctx.user_message or (
            "This listing is no longer available. Please refresh the catalog."
        )
        super().__init__(
            f"Listing '{listing_id}' is no longer available (status: {status})",
            "NO_LONGER_AVAILABLE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.status = status


class InsufficientStockError(FarmLinkError):
    """Requested quantity exceeds the listing's current stock."""
    def __init__(self, available: int, requested: int, context: ErrorContext | None = None):
        super().__init__(
            f"Insufficient produce quantity: requested {requested}, available {available}",
            "INSUFFICIENT_STOCK", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.available = available
        self.requested = requested


class InvalidTransitionError(FarmLinkError):
    """Order status change not permitted from its current status or by this actor."""
    def __init__(self, current: str, target: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot move order from '{current}' to '{target}': {reason}",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.current = current
        self.target = target


class AuthenticationError(FarmLinkError):
    """Credentials rejected or no authenticated identity."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.ERROR, context, 401,
        )


class PermissionDeniedError(FarmLinkError):
    """Advisory client-side role or ownership check failed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PERMISSION_DENIED", ErrorCategory.PERMISSION,
            ErrorSeverity.ERROR, context, 403,
        )


class ConflictError(FarmLinkError):
    """Conditional write matched zero rows: someone else changed the row first."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or (
            "Someone else just completed this transaction. Please try again."
        )
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


# ─── Backend Errors (500-level) ─────────────────────────────────

class BackendError(FarmLinkError):
    """Remote store call rejected, failed or timed out."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Backend {operation} failed: {message}",
            "BACKEND_FAILURE", ErrorCategory.BACKEND,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class PartialFailureError(FarmLinkError):
    """Listing stock was adjusted but the matching order write did not land.

    Requires manual reconciliation; never retried automatically.
    """
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_message = ctx.user_message or (
            "The stock was updated but the order could not be. Please contact support."
        )
        super().__init__(
            message, "PARTIAL_FAILURE", ErrorCategory.RECONCILIATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
