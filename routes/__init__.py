"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.policies import router as policies_router
from routes.customers import router as customers_router
from routes.sub_agents import router as sub_agents_router
from routes.policy_settings import router as policy_settings_router
from routes.ai_uploads import router as ai_uploads_router
from routes.feature_requests import router as feature_requests_router
from routes.admin import router as admin_router
from routes.bulk_upload import router as bulk_upload_router

__all__ = [
    "policies_router",
    "customers_router",
    "sub_agents_router",
    "policy_settings_router",
    "ai_uploads_router",
    "feature_requests_router",
    "admin_router",
    "bulk_upload_router",
]
