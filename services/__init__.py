"""
Business logic services.

Each service handles one domain area.
"""

from services.customer_service import CustomerService, get_customer_service
from services.sub_agent_service import SubAgentService, get_sub_agent_service
from services.policy_service import PolicyService, get_policy_service
from services.bulk_upload_service import (
    BulkUploadService,
    get_bulk_upload_service,
    BatchResult,
    RowResult,
    check_upload_file,
)
from services.policy_settings_service import PolicySettingsService, get_policy_settings_service
from services.ai_upload_service import AIUploadService, get_ai_upload_service
from services.feature_request_service import FeatureRequestService, get_feature_request_service
from services.admin_service import AdminService, get_admin_service

__all__ = [
    "CustomerService",
    "get_customer_service",
    "SubAgentService",
    "get_sub_agent_service",
    "PolicyService",
    "get_policy_service",
    "BulkUploadService",
    "get_bulk_upload_service",
    "BatchResult",
    "RowResult",
    "check_upload_file",
    "PolicySettingsService",
    "get_policy_settings_service",
    "AIUploadService",
    "get_ai_upload_service",
    "FeatureRequestService",
    "get_feature_request_service",
    "AdminService",
    "get_admin_service",
]
