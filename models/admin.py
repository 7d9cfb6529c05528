"""
Admin schemas: portal users, subscriptions, and the broadcast banner.
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import BaseSchema


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"
    LOCKED = "locked"


class AppUserResponse(BaseSchema):
    """Row from the `users` table as shown on the admin panel."""

    id: str
    email: str
    display_name: str = "Unknown User"
    mobile_number: Optional[str] = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    subscription_status: SubscriptionStatus = SubscriptionStatus.TRIAL
    subscription_plan: Optional[int] = None
    trial_start_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None
    subscription_start_date: Optional[datetime] = None
    subscription_end_date: Optional[datetime] = None
    is_locked: bool = False
    locked_reason: Optional[str] = None
    locked_by: Optional[str] = None
    locked_at: Optional[datetime] = None
    policy_count: int = 0


class LockUserRequest(BaseSchema):
    admin_id: str
    reason: str = Field(..., min_length=1, max_length=500)


class SubscriptionDaysRequest(BaseSchema):
    days: int = Field(..., ge=1, le=3650)


class ChangePlanRequest(BaseSchema):
    plan: int = Field(..., description="Monthly price of the plan, e.g. 499")


class PlanSummary(BaseSchema):
    plan: str
    count: int
    income: int


class AdminStats(BaseSchema):
    """Counts over non-admin users plus income from active plans."""
    total: int
    trial: int
    active: int
    expired: int
    locked: int
    plans: list[PlanSummary]
    total_monthly_income: int


class NotificationSet(BaseSchema):
    admin_id: str
    message: str = Field(..., min_length=1, max_length=1000)


class AdminNotificationResponse(BaseSchema):
    id: str
    user_id: str
    message: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
