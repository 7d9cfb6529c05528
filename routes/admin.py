"""
Admin API routes: users, subscriptions, broadcast notification.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.admin import (
    AppUserResponse,
    AdminStats,
    SubscriptionStatus,
    LockUserRequest,
    SubscriptionDaysRequest,
    ChangePlanRequest,
    NotificationSet,
    AdminNotificationResponse,
)
from services.admin_service import get_admin_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
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


# ===================
# USERS
# ===================

@router.get("/users", response_model=list[AppUserResponse])
async def list_users(
    search: Optional[str] = Query(None, description="Name or email"),
    status: Optional[SubscriptionStatus] = Query(None, description="Subscription status")
):
    """Agents (admins excluded) with their policy counts, newest first."""
    try:
        return get_admin_service().list_users(search=search, status=status)
    except Exception as e:
        return handle_error(e)


@router.get("/stats", response_model=AdminStats)
async def get_stats():
    try:
        return get_admin_service().get_stats()
    except Exception as e:
        return handle_error(e)


@router.post("/users/{user_id}/lock", response_model=AppUserResponse)
async def lock_user(user_id: str, data: LockUserRequest):
    """
    Raises:
        404: User not found
    """
    try:
        return get_admin_service().lock_user(user_id, data.reason, data.admin_id)
    except Exception as e:
        return handle_error(e)


@router.post("/users/{user_id}/unlock", response_model=AppUserResponse)
async def unlock_user(user_id: str):
    try:
        return get_admin_service().unlock_user(user_id)
    except Exception as e:
        return handle_error(e)


@router.post("/users/{user_id}/subscription/activate", response_model=AppUserResponse)
async def activate_subscription(user_id: str, data: SubscriptionDaysRequest):
    try:
        return get_admin_service().activate_subscription(user_id, data.days)
    except Exception as e:
        return handle_error(e)


@router.post("/users/{user_id}/subscription/extend", response_model=AppUserResponse)
async def extend_subscription(user_id: str, data: SubscriptionDaysRequest):
    try:
        return get_admin_service().extend_subscription(user_id, data.days)
    except Exception as e:
        return handle_error(e)


@router.patch("/users/{user_id}/plan", response_model=AppUserResponse)
async def change_plan(user_id: str, data: ChangePlanRequest):
    """
    Raises:
        422: Unknown plan
    """
    try:
        return get_admin_service().change_plan(user_id, data.plan)
    except Exception as e:
        return handle_error(e)


# ===================
# NOTIFICATION
# ===================

@router.get("/notification", response_model=Optional[AdminNotificationResponse])
async def get_notification():
    """Banner shown to every agent, or null."""
    try:
        return get_admin_service().get_active_notification()
    except Exception as e:
        return handle_error(e)


@router.put("/notification", response_model=AdminNotificationResponse)
async def set_notification(data: NotificationSet):
    try:
        return get_admin_service().set_notification(data.admin_id, data.message)
    except Exception as e:
        return handle_error(e)


@router.delete("/notification", status_code=204)
async def clear_notification(admin_id: str = Query(...)):
    try:
        get_admin_service().clear_notification(admin_id)
        return None
    except Exception as e:
        return handle_error(e)
