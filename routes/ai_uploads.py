"""
AI upload quota routes.

The extraction itself runs outside this API; these endpoints gate it and
count successful runs.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.ai_upload import (
    AIUploadEligibility,
    AIUploadRecordRequest,
    AIUploadRecordResponse,
    PlanLimit,
)
from services.ai_upload_service import (
    get_ai_upload_service,
    list_plan_limits,
    format_quota,
)
from exceptions import AppError, ExternalServiceError

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


@router.get("/plans", response_model=list[PlanLimit])
async def get_plans():
    """Monthly AI upload limit of every plan."""
    return list_plan_limits()


@router.get("/quota")
async def get_quota(user_id: str = Query(...)):
    """
    This month's usage plus a display string.

    Raises:
        503: Quota function unavailable
    """
    try:
        quota = get_ai_upload_service().get_quota(user_id)
        if quota is None:
            raise ExternalServiceError("ai_quota", "Unable to fetch quota information")
        return {
            **quota.model_dump(),
            "display": format_quota(quota),
        }
    except Exception as e:
        return handle_error(e)


@router.get("/eligibility", response_model=AIUploadEligibility)
async def check_eligibility(user_id: str = Query(...)):
    """Whether the agent may start another AI extraction now."""
    try:
        return get_ai_upload_service().check_can_upload(user_id)
    except Exception as e:
        return handle_error(e)


@router.post("/record", response_model=AIUploadRecordResponse)
async def record_upload(data: AIUploadRecordRequest):
    """
    Count one successful extraction. Call only after the policy is saved.

    Raises:
        403: No AI uploads on this plan, or the month's quota is used up
        404: Unknown user
        503: Quota functions unavailable
    """
    try:
        return get_ai_upload_service().record_successful_upload(data)
    except Exception as e:
        return handle_error(e)
