"""
Customer schemas for validation and serialization.
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from datetime import date

from models.base import BaseSchema, TimestampMixin


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class CustomerType(str, Enum):
    INDIVIDUAL = "Individual"
    CORPORATE = "Corporate"
    FAMILY = "Family"


class CustomerCreate(BaseSchema):
    """
    Create a new customer.

    Required: customer_name
    """

    customer_name: str = Field(..., min_length=1, max_length=255)
    contact_no: Optional[str] = None
    email_id: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    anniversary_date: Optional[date] = None
    gender: Optional[Gender] = None
    profession: Optional[str] = None
    occupation: Optional[str] = None
    company_name: Optional[str] = None
    is_business_owner: bool = False
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_address: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    business_established_date: Optional[date] = None
    reference_by: Optional[str] = None
    customer_type: CustomerType = CustomerType.INDIVIDUAL
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class CustomerUpdate(BaseSchema):
    """
    Update existing customer.

    All fields optional - only provided fields are updated.
    """

    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_no: Optional[str] = None
    email_id: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    anniversary_date: Optional[date] = None
    gender: Optional[Gender] = None
    profession: Optional[str] = None
    occupation: Optional[str] = None
    company_name: Optional[str] = None
    is_business_owner: Optional[bool] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_address: Optional[str] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    business_established_date: Optional[date] = None
    reference_by: Optional[str] = None
    customer_type: Optional[CustomerType] = None
    notes: Optional[str] = None
    tags: Optional[list[str]] = None


class CustomerResponse(CustomerCreate, TimestampMixin):
    """Customer as stored."""

    id: str
    user_id: str
    is_active: bool = True
    customer_type: Optional[CustomerType] = CustomerType.INDIVIDUAL
    is_business_owner: Optional[bool] = False
    tags: Optional[list[str]] = Field(default_factory=list)


class CustomerListResponse(BaseSchema):
    data: list[CustomerResponse]
    total: int
