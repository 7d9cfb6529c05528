"""
Feature request schemas.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema, TimestampMixin


class FeatureRequestStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    PLANNED = "planned"
    COMPLETED = "completed"
    REJECTED = "rejected"


class FeatureRequestPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FeatureRequestCreate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)


class FeatureRequestUpdate(BaseSchema):
    """Admin triage. Only provided fields are updated."""
    status: Optional[FeatureRequestStatus] = None
    priority: Optional[FeatureRequestPriority] = None
    admin_notes: Optional[str] = Field(None, max_length=5000)


class FeatureRequestResponse(BaseSchema, TimestampMixin):
    id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    title: str
    description: str
    status: FeatureRequestStatus = FeatureRequestStatus.PENDING
    priority: FeatureRequestPriority = FeatureRequestPriority.MEDIUM
    admin_notes: Optional[str] = None
