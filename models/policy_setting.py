"""
Policy settings schemas.

Per-agent dropdown values (insurance companies, product types, lines of
business) offered on the policy form.
"""

from pydantic import Field
from enum import Enum

from models.base import BaseSchema, TimestampMixin


class SettingCategory(str, Enum):
    """Dropdown the value belongs to."""
    INSURANCE_COMPANY = "insurance_company"
    PRODUCT_TYPE = "product_type"
    LOB = "lob"


class PolicySettingCreate(BaseSchema):
    category: SettingCategory
    value: str = Field(..., min_length=1, max_length=255)


class PolicySettingUpdate(BaseSchema):
    value: str = Field(..., min_length=1, max_length=255)


class PolicySettingResponse(BaseSchema, TimestampMixin):
    id: str
    user_id: str
    category: SettingCategory
    value: str
    is_active: bool = True


class GroupedPolicySettings(BaseSchema):
    """Every category is present, even when empty."""
    insurance_company: list[PolicySettingResponse] = Field(default_factory=list)
    product_type: list[PolicySettingResponse] = Field(default_factory=list)
    lob: list[PolicySettingResponse] = Field(default_factory=list)
