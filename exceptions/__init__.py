"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Policies
    PolicyNotFoundError,

    # Bulk upload
    CSVFormatError,
    InvalidUploadFileError,
    BulkUploadCancelledError,

    # Customers
    CustomerNotFoundError,

    # Sub agents
    SubAgentNotFoundError,
    InvalidCredentialsError,

    # Policy settings
    PolicySettingNotFoundError,

    # Feature requests
    FeatureRequestNotFoundError,

    # Users / subscriptions
    UserNotFoundError,
    InvalidSubscriptionError,
    AIQuotaExceededError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Policies
    "PolicyNotFoundError",

    # Bulk upload
    "CSVFormatError",
    "InvalidUploadFileError",
    "BulkUploadCancelledError",

    # Customers
    "CustomerNotFoundError",

    # Sub agents
    "SubAgentNotFoundError",
    "InvalidCredentialsError",

    # Policy settings
    "PolicySettingNotFoundError",

    # Feature requests
    "FeatureRequestNotFoundError",

    # Users / subscriptions
    "UserNotFoundError",
    "InvalidSubscriptionError",
    "AIQuotaExceededError",
]
