"""
Sub agent schemas.

Sub agents sell policies on behalf of an agent and may log in to a
read-only portal with their own email and password.
"""

from pydantic import Field, model_validator
from typing import Optional

from models.base import BaseSchema, TimestampMixin


class SubAgentCreate(BaseSchema):
    """
    Create a new sub agent.

    Login credentials are optional but must be given together.
    """

    user_id: str = Field(..., description="Owning agent")
    sub_agent_name: str = Field(..., min_length=1, max_length=255)
    contact_no: Optional[str] = None
    email_id: Optional[str] = None
    login_email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    address: Optional[str] = None
    notes: Optional[str] = None


class SubAgentUpdate(BaseSchema):
    """Partial update. A new password is re-hashed before storage."""

    sub_agent_name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_no: Optional[str] = None
    email_id: Optional[str] = None
    login_email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    address: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class SubAgentResponse(BaseSchema, TimestampMixin):
    """Sub agent with running totals. The password hash is never returned."""

    id: str
    user_id: str
    sub_agent_name: str
    contact_no: Optional[str] = None
    email_id: Optional[str] = None
    login_email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    total_policies: int = 0
    total_premium_amount: float = 0.0
    total_commission: float = 0.0
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def fill_totals(cls, data):
        """Stats columns are nullable and numeric columns arrive as strings."""
        if isinstance(data, dict):
            data = dict(data)
            data["total_policies"] = data.get("total_policies") or 0
            data["total_premium_amount"] = float(data.get("total_premium_amount") or 0)
            data["total_commission"] = float(data.get("total_commission") or 0)
            if data.get("is_active") is None:
                data["is_active"] = True
        return data


class SubAgentLogin(BaseSchema):
    login_email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class SubAgentStats(BaseSchema):
    sub_agent_id: str
    total_policies: int
    total_premium_amount: float
    total_commission: float
