"""
Feature request API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.feature_request import (
    FeatureRequestCreate,
    FeatureRequestUpdate,
    FeatureRequestResponse,
)
from services.feature_request_service import get_feature_request_service
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


@router.get("", response_model=list[FeatureRequestResponse])
async def list_feature_requests(
    user_id: Optional[str] = Query(None, description="Only this agent's requests")
):
    """Newest first. Without user_id every request is returned (admin view)."""
    try:
        service = get_feature_request_service()
        if user_id:
            return service.get_for_user(user_id)
        return service.get_all()
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=FeatureRequestResponse, status_code=201)
async def create_feature_request(
    data: FeatureRequestCreate,
    user_id: str = Query(..., description="Requesting agent")
):
    """
    Raises:
        404: Requesting user has no profile
    """
    try:
        return get_feature_request_service().create(user_id, data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{request_id}", response_model=FeatureRequestResponse)
async def update_feature_request(request_id: str, data: FeatureRequestUpdate):
    """
    Admin triage: status, priority, notes.

    Raises:
        404: Request not found
    """
    try:
        return get_feature_request_service().update(request_id, data)
    except Exception as e:
        return handle_error(e)


@router.delete("/{request_id}", status_code=204)
async def delete_feature_request(request_id: str):
    try:
        get_feature_request_service().delete(request_id)
        return None
    except Exception as e:
        return handle_error(e)
