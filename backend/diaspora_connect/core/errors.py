"""Error Hierarchy: typed, categorized exceptions for all Diaspora Connect failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Request errors (400-level) are recoverable; vendor/datastore errors (500-level) are critical
    - to_response() produces the REST envelope used by every error handler
    - No vendor internals leaked in user-facing messages beyond the vendor's own message

Design Decisions:
    - Single hierarchy with DiasporaConnectError base: one FastAPI handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATASTORE = "datastore"
    EXTERNAL_API = "external_api"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    resource_id: str | None = None
    vendor_code: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class DiasporaConnectError(Exception):
    """Base exception for all Diaspora Connect errors."""

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
                    "user_id": self.context.user_id,
                    "resource_id": self.context.resource_id,
                    "vendor_code": self.context.vendor_code,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class InvalidRequestError(DiasporaConnectError):
    """Request failed a business validation rule."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["field"] = self.field
        return response


class WebhookSignatureError(DiasporaConnectError):
    """Stripe webhook payload or signature could not be verified."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Webhook Error: {message}",
            "WEBHOOK_SIGNATURE_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class AuthenticationError(DiasporaConnectError):
    """Missing, malformed, expired or revoked ID token."""
    def __init__(self, message: str = "Authentication required", context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(DiasporaConnectError):
    """Caller's role does not allow the operation."""
    def __init__(self, required_role: str, context: ErrorContext | None = None):
        super().__init__(
            f"This action requires the '{required_role}' role",
            "PERMISSION_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.required_role = required_role


class MembershipTierRequiredError(DiasporaConnectError):
    """Caller's membership tier is below the content's tier."""
    def __init__(self, required_tier: str, context: ErrorContext | None = None):
        super().__init__(
            f"This content requires a '{required_tier}' membership or higher",
            "MEMBERSHIP_TIER_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.INFO, context, 403,
        )
        self.required_tier = required_tier


class ResourceNotFoundError(DiasporaConnectError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class ConflictError(DiasporaConnectError):
    """Operation conflicts with existing state (duplicate signature, etc.)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatastoreError(DiasporaConnectError):
    """Firestore operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Datastore {operation} failed: {message}",
            "DATASTORE_ERROR", ErrorCategory.DATASTORE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class PaymentProviderError(DiasporaConnectError):
    """Stripe API call failed."""
    def __init__(
        self,
        message: str,
        stripe_code: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.vendor_code = stripe_code
        super().__init__(
            message, "PAYMENT_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 502,
        )
        self.stripe_code = stripe_code


class EmailDeliveryError(DiasporaConnectError):
    """Resend API call failed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Email could not be sent: {message}",
            "EMAIL_DELIVERY_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )


class ChatCompletionError(DiasporaConnectError):
    """OpenAI API call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"OpenAI API error ({api_error_type}): {message}",
            "CHAT_COMPLETION_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type


class ServiceNotConfiguredError(DiasporaConnectError):
    """A vendor integration is missing its credentials."""
    def __init__(self, service: str, setting: str, context: ErrorContext | None = None):
        super().__init__(
            f"{service} is not configured ({setting} missing)",
            "SERVICE_NOT_CONFIGURED", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.service = service
        self.setting = setting
