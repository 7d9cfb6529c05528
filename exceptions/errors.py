"""
Custom exception classes for the application.

Every error carries a machine-readable code, a human-readable message,
the HTTP status it maps to, and optional details for the client.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "POLICY_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# POLICY ERRORS
# ===================

class PolicyNotFoundError(NotFoundError):
    """Policy not found."""

    def __init__(self, policy_id: str):
        super().__init__(
            resource="Policy",
            identifier=policy_id,
            code="POLICY_NOT_FOUND"
        )


# ===================
# BULK UPLOAD ERRORS
# ===================

class CSVFormatError(ValidationError):
    """Uploaded CSV is structurally unusable (no header or no data rows)."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CSV_FORMAT_ERROR",
            message=message,
            details=details
        )


class InvalidUploadFileError(ValidationError):
    """Uploaded file is not an acceptable CSV."""

    def __init__(self, filename: Optional[str], reason: str):
        super().__init__(
            code="INVALID_FILE_TYPE",
            message=reason,
            details={"filename": filename}
        )


class BulkUploadCancelledError(ConflictError):
    """Bulk upload stopped before every row was processed."""

    def __init__(
        self,
        processed: int,
        total_rows: int,
        success_count: int,
        failure_count: int
    ):
        super().__init__(
            message=f"Upload cancelled after {processed} of {total_rows} rows",
            code="BULK_UPLOAD_CANCELLED",
            details={
                "processed": processed,
                "total_rows": total_rows,
                "success_count": success_count,
                "failure_count": failure_count,
            }
        )


# ===================
# CUSTOMER ERRORS
# ===================

class CustomerNotFoundError(NotFoundError):
    """Customer not found."""

    def __init__(self, customer_id: str):
        super().__init__(
            resource="Customer",
            identifier=customer_id,
            code="CUSTOMER_NOT_FOUND"
        )


# ===================
# SUB AGENT ERRORS
# ===================

class SubAgentNotFoundError(NotFoundError):
    """Sub agent not found."""

    def __init__(self, sub_agent_id: str):
        super().__init__(
            resource="Sub agent",
            identifier=sub_agent_id,
            code="SUB_AGENT_NOT_FOUND"
        )


class InvalidCredentialsError(AppError):
    """Sub agent login rejected (401)."""

    def __init__(self):
        super().__init__(
            code="INVALID_CREDENTIALS",
            message="Invalid login email or password",
            status_code=401
        )


# ===================
# POLICY SETTINGS ERRORS
# ===================

class PolicySettingNotFoundError(NotFoundError):
    """Policy setting not found."""

    def __init__(self, setting_id: str):
        super().__init__(
            resource="Policy setting",
            identifier=setting_id,
            code="POLICY_SETTING_NOT_FOUND"
        )


# ===================
# FEATURE REQUEST ERRORS
# ===================

class FeatureRequestNotFoundError(NotFoundError):
    """Feature request not found."""

    def __init__(self, request_id: str):
        super().__init__(
            resource="Feature request",
            identifier=request_id,
            code="FEATURE_REQUEST_NOT_FOUND"
        )


# ===================
# USER / SUBSCRIPTION ERRORS
# ===================

class UserNotFoundError(NotFoundError):
    """Portal user not found."""

    def __init__(self, user_id: str):
        super().__init__(
            resource="User",
            identifier=user_id,
            code="USER_NOT_FOUND"
        )


class InvalidSubscriptionError(ValidationError):
    """Subscription change rejected."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_SUBSCRIPTION",
            message=message,
            details=details
        )


class AIQuotaExceededError(AppError):
    """AI upload quota exhausted or not included in plan (403)."""

    def __init__(self, message: str, limit: int, used: int):
        super().__init__(
            code="AI_QUOTA_EXCEEDED",
            message=message,
            status_code=403,
            details={"monthly_limit": limit, "uploads_used": used}
        )
