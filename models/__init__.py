"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
    total_pages,
)
from models.policy import (
    PolicyStatus,
    RepeatReminder,
    PolicyCreate,
    PolicyUpdate,
    PolicyResponse,
    PolicyListResponse,
)
from models.customer import (
    Gender,
    CustomerType,
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListResponse,
)
from models.sub_agent import (
    SubAgentCreate,
    SubAgentUpdate,
    SubAgentResponse,
    SubAgentLogin,
    SubAgentStats,
)
from models.policy_setting import (
    SettingCategory,
    PolicySettingCreate,
    PolicySettingUpdate,
    PolicySettingResponse,
    GroupedPolicySettings,
)
from models.feature_request import (
    FeatureRequestStatus,
    FeatureRequestPriority,
    FeatureRequestCreate,
    FeatureRequestUpdate,
    FeatureRequestResponse,
)
from models.admin import (
    UserRole,
    SubscriptionStatus,
    AppUserResponse,
    LockUserRequest,
    SubscriptionDaysRequest,
    ChangePlanRequest,
    PlanSummary,
    AdminStats,
    NotificationSet,
    AdminNotificationResponse,
)
from models.ai_upload import (
    AIQuotaStatus,
    AIUploadEligibility,
    AIUploadRecordRequest,
    AIUploadRecordResponse,
    PlanLimit,
)
from models.bulk_upload import (
    RowResultResponse,
    BulkUploadResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",
    "total_pages",

    # Policies
    "PolicyStatus",
    "RepeatReminder",
    "PolicyCreate",
    "PolicyUpdate",
    "PolicyResponse",
    "PolicyListResponse",

    # Customers
    "Gender",
    "CustomerType",
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerResponse",
    "CustomerListResponse",

    # Sub agents
    "SubAgentCreate",
    "SubAgentUpdate",
    "SubAgentResponse",
    "SubAgentLogin",
    "SubAgentStats",

    # Policy settings
    "SettingCategory",
    "PolicySettingCreate",
    "PolicySettingUpdate",
    "PolicySettingResponse",
    "GroupedPolicySettings",

    # Feature requests
    "FeatureRequestStatus",
    "FeatureRequestPriority",
    "FeatureRequestCreate",
    "FeatureRequestUpdate",
    "FeatureRequestResponse",

    # Admin
    "UserRole",
    "SubscriptionStatus",
    "AppUserResponse",
    "LockUserRequest",
    "SubscriptionDaysRequest",
    "ChangePlanRequest",
    "PlanSummary",
    "AdminStats",
    "NotificationSet",
    "AdminNotificationResponse",

    # AI uploads
    "AIQuotaStatus",
    "AIUploadEligibility",
    "AIUploadRecordRequest",
    "AIUploadRecordResponse",
    "PlanLimit",

    # Bulk upload
    "RowResultResponse",
    "BulkUploadResponse",
]
