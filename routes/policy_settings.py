"""
Policy settings API routes.

Dropdown values for the policy form, per agent.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.policy_setting import (
    SettingCategory,
    PolicySettingCreate,
    PolicySettingUpdate,
    PolicySettingResponse,
    GroupedPolicySettings,
)
from services.policy_settings_service import get_policy_settings_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


@router.get("", response_model=GroupedPolicySettings)
async def get_all_settings(user_id: str = Query(..., description="Owning agent")):
    """All active values, grouped by category."""
    try:
        return get_policy_settings_service().get_grouped(user_id)
    except Exception as e:
        return handle_error(e)


@router.post("/initialize")
async def initialize_defaults(user_id: str = Query(..., description="Owning agent")):
    """Seed the default lists. Does nothing if the agent has any settings."""
    try:
        inserted = get_policy_settings_service().initialize_defaults(user_id)
        return {"inserted": inserted}
    except Exception as e:
        return handle_error(e)


@router.get("/{category}", response_model=list[PolicySettingResponse])
async def get_category(
    category: SettingCategory,
    user_id: str = Query(..., description="Owning agent")
):
    try:
        return get_policy_settings_service().get_by_category(user_id, category)
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=PolicySettingResponse, status_code=201)
async def create_setting(
    data: PolicySettingCreate,
    user_id: str = Query(..., description="Owning agent")
):
    try:
        return get_policy_settings_service().create(user_id, data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{setting_id}", response_model=PolicySettingResponse)
async def update_setting(
    setting_id: str,
    data: PolicySettingUpdate,
    user_id: str = Query(..., description="Owning agent")
):
    """
    Raises:
        404: Setting not found for this agent
    """
    try:
        return get_policy_settings_service().update(setting_id, user_id, data.value)
    except Exception as e:
        return handle_error(e)


@router.delete("/{setting_id}", status_code=204)
async def delete_setting(
    setting_id: str,
    user_id: str = Query(..., description="Owning agent"),
    permanent: bool = Query(False, description="Remove instead of hiding")
):
    """
    Hide a value from the dropdown, or remove it with permanent=true.

    Raises:
        404: Setting not found for this agent
    """
    try:
        service = get_policy_settings_service()
        if permanent:
            service.delete(setting_id, user_id)
        else:
            service.deactivate(setting_id, user_id)
        return None
    except Exception as e:
        return handle_error(e)
