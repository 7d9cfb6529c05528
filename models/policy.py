"""
Policy schemas for validation and serialization.

Column names match the `policies` table. Premium and commission columns
other than premium_amount are stored as text, exactly as agents type them.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema, TimestampMixin


class PolicyStatus(str, Enum):
    """Policy lifecycle status."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    PENDING = "pending"


class RepeatReminder(str, Enum):
    """How often a renewal reminder repeats. Blank means no reminder."""
    NONE = ""
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    HALF_YEARLY = "Half-yearly"
    YEARLY = "Yearly"


class PolicyBase(BaseSchema):
    """Fields shared by create and response schemas."""

    policyholder_name: str = Field(..., min_length=1, max_length=255)
    policy_number: str = Field(..., min_length=1, max_length=100)
    insurance_company: str = Field(..., min_length=1, max_length=255)
    policy_type: str = Field(
        "General",
        min_length=1,
        max_length=50,
        description="General, Life, Health, ...",
        examples=["General", "Life"]
    )
    policy_start_date: str = Field(..., description="YYYY-MM-DD")
    policy_end_date: str = Field(..., description="YYYY-MM-DD")

    contact_no: Optional[str] = None
    email_id: Optional[str] = None
    address: Optional[str] = None
    product_type: Optional[str] = None
    business_type: str = "New"
    member_of: Optional[str] = None
    reference_from_name: Optional[str] = None
    status: PolicyStatus = PolicyStatus.ACTIVE

    premium_amount: Optional[float] = None
    coverage_amount: Optional[float] = None
    premium_due_date: Optional[str] = None
    payment_frequency: Optional[str] = None
    net_premium: Optional[str] = None
    od_premium: Optional[str] = None
    third_party_premium: Optional[str] = None
    gst: Optional[str] = None
    total_premium: Optional[str] = None
    ncb_percentage: Optional[str] = None

    registration_no: Optional[str] = None
    engine_no: Optional[str] = None
    chasis_no: Optional[str] = None
    hp: Optional[str] = None
    idv: Optional[str] = None
    risk_location_address: Optional[str] = None

    commission_percentage: Optional[str] = None
    commission_amount: Optional[str] = None
    sub_agent_id: Optional[str] = None
    sub_agent_commission_percentage: Optional[str] = None
    sub_agent_commission_amount: Optional[str] = None

    nominee_name: Optional[str] = None
    nominee_relationship: Optional[str] = None
    remark: Optional[str] = None
    notes: Optional[str] = None
    is_one_time_policy: bool = False
    repeat_reminder: RepeatReminder = RepeatReminder.NONE
    documents: list[str] = Field(default_factory=list)


class PolicyCreate(PolicyBase):
    """
    Create a new policy.

    Required: policyholder_name, policy_number, insurance_company,
    policy_start_date, policy_end_date
    """
    pass


class PolicyUpdate(BaseSchema):
    """
    Update existing policy.

    All fields optional - only provided fields are updated.
    """

    policyholder_name: Optional[str] = Field(None, min_length=1, max_length=255)
    policy_number: Optional[str] = Field(None, min_length=1, max_length=100)
    insurance_company: Optional[str] = Field(None, min_length=1, max_length=255)
    policy_type: Optional[str] = Field(None, min_length=1, max_length=50)
    policy_start_date: Optional[str] = None
    policy_end_date: Optional[str] = None
    contact_no: Optional[str] = None
    email_id: Optional[str] = None
    address: Optional[str] = None
    product_type: Optional[str] = None
    business_type: Optional[str] = None
    status: Optional[PolicyStatus] = None
    premium_amount: Optional[float] = None
    total_premium: Optional[str] = None
    net_premium: Optional[str] = None
    gst: Optional[str] = None
    commission_percentage: Optional[str] = None
    commission_amount: Optional[str] = None
    sub_agent_id: Optional[str] = None
    sub_agent_commission_percentage: Optional[str] = None
    sub_agent_commission_amount: Optional[str] = None
    remark: Optional[str] = None
    notes: Optional[str] = None
    is_one_time_policy: Optional[bool] = None
    repeat_reminder: Optional[RepeatReminder] = None


class PolicyResponse(PolicyBase, TimestampMixin):
    """Policy as stored, with owner and linked customer."""

    id: str = Field(..., description="Policy UUID")
    user_id: str = Field(..., description="Owning agent")
    customer_id: Optional[str] = None
    created_by_name: Optional[str] = None


class PolicyListResponse(BaseSchema):
    """List of policies with pagination."""

    data: list[PolicyResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
