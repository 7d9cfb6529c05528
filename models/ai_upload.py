"""
AI upload quota schemas.

Agents on paid plans may extract policies from PDFs with an external
AI workflow; each successful extraction counts against a monthly quota.
"""

from pydantic import Field
from typing import Optional, Literal

from models.base import BaseSchema


class AIQuotaStatus(BaseSchema):
    uploads_used: int = 0
    monthly_limit: int = 0
    remaining_uploads: int = 0
    subscription_plan: int = 199
    reset_date: Optional[str] = None


class AIUploadEligibility(BaseSchema):
    can_upload: bool
    reason: str
    remaining: int = 0
    limit: int = 0


class AIUploadRecordRequest(BaseSchema):
    user_id: str
    policy_number: Optional[str] = None
    insurance_company: Optional[str] = None
    policyholder_name: Optional[str] = None
    extraction_source: Literal["file", "camera", "manual"] = "file"


class AIUploadRecordResponse(BaseSchema):
    success: bool
    message: str
    uploads_used: int = 0
    remaining_uploads: int = 0
    quota_exceeded: bool = False


class PlanLimit(BaseSchema):
    plan: int
    monthly_limit: int
    description: str = Field(..., description="Label for the pricing page")
