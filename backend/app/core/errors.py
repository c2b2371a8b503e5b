"""Error Hierarchy — typed, categorized exceptions for all ORCID++ failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope consumed by the SPA
    - Upstream ORCID failures keep the upstream status and body (details)

Design Decisions:
    - Single hierarchy with OrcidPlusError base: FastAPI global handler catches all (ADR: uniform error shape)
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
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    orcid_id: str | None = None
    put_code: str | None = None
    resource: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class OrcidPlusError(Exception):
    """Base exception for all ORCID++ errors."""

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
                    "orcid_id": self.context.orcid_id,
                    "put_code": self.context.put_code,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationFailedError(OrcidPlusError):
    """Business validation failed on a request payload."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = [
            {"field": self.field, "message": self.message},
        ]
        return response


class InvalidOrcidError(OrcidPlusError):
    """ORCID identifier does not match 0000-0000-0000-000X."""
    def __init__(self, value: str, context: ErrorContext | None = None):
        super().__init__(
            "Invalid ORCID format. Expected format: 0000-0000-0000-0000",
            "INVALID_ORCID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.value = value


class InvalidSectionError(OrcidPlusError):
    """Requested ORCID record section is not proxied."""
    def __init__(
        self, section: str, valid_sections: tuple[str, ...],
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid section. Valid sections: {', '.join(valid_sections)}",
            "INVALID_SECTION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.section = section


class InvalidSearchFilterError(OrcidPlusError):
    """Search filter names a field ORCID search does not support."""
    def __init__(self, field: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unsupported search filter '{field}'",
            "INVALID_SEARCH_FILTER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class AuthorizationRequiredError(OrcidPlusError):
    """ORCID proxy call made without an Authorization header."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authorization header is required",
            "AUTHORIZATION_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ResourceNotFoundError(OrcidPlusError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class DuplicateResourceError(OrcidPlusError):
    """Owner already has a publication/project with the same title/name."""
    def __init__(
        self, resource_type: str, name: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{name}' already exists for this researcher",
            "DUPLICATE_RESOURCE", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class ConcurrentWriteError(OrcidPlusError):
    """A unique constraint rejected the commit (two writers raced on the same row)."""
    def __init__(self, constraint: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            "Conflicting write, retry the request",
            "CONCURRENT_WRITE", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.constraint = constraint


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(OrcidPlusError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class OrcidAPIError(OrcidPlusError):
    """ORCID API call failed. http_status mirrors the upstream status when known."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        upstream_status: int | None = None,
        details: Any = None,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        if upstream_status is not None:
            status = upstream_status
        elif api_error_type == "timeout":
            status = 504
        else:
            status = 502
        super().__init__(
            message, "ORCID_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL if status >= 500 else ErrorSeverity.ERROR,
            ctx, status,
        )
        self.api_error_type = api_error_type
        self.upstream_status = upstream_status
        self.details = details

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = self.details
        return response
