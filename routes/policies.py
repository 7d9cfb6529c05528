"""
Policy API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.base import total_pages
from models.policy import (
    PolicyCreate,
    PolicyUpdate,
    PolicyResponse,
    PolicyListResponse,
    PolicyStatus,
)
from services.policy_service import get_policy_service
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
# ROUTES
# ===================

@router.get("", response_model=PolicyListResponse)
async def list_policies(
    user_id: str = Query(..., description="Owning agent"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    status: Optional[PolicyStatus] = Query(None, description="Filter by status"),
    insurance_company: Optional[str] = Query(None, description="Filter by company"),
    search: Optional[str] = Query(None, description="Policyholder name or policy number")
):
    """List an agent's policies, newest first."""
    try:
        service = get_policy_service()

        policies, total = service.get_all(
            user_id=user_id,
            page=page,
            page_size=page_size,
            status=status,
            insurance_company=insurance_company,
            search=search
        )

        return PolicyListResponse(
            data=policies,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size)
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{policy_id}", response_model=PolicyResponse)
async def get_policy(policy_id: str):
    """
    Get a single policy by ID.

    Raises:
        404: Policy not found
    """
    try:
        return get_policy_service().get_by_id(policy_id)
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=PolicyResponse, status_code=201)
async def create_policy(
    data: PolicyCreate,
    user_id: str = Query(..., description="Owning agent"),
    user_display_name: Optional[str] = Query(None)
):
    """
    Create a policy. The policyholder is linked to (or added as) a customer.

    Raises:
        422: Validation error
    """
    try:
        return get_policy_service().create(data, user_id, user_display_name)
    except Exception as e:
        return handle_error(e)


@router.patch("/{policy_id}", response_model=PolicyResponse)
async def update_policy(policy_id: str, data: PolicyUpdate):
    """
    Update an existing policy.

    Raises:
        404: Policy not found
    """
    try:
        return get_policy_service().update(policy_id, data)
    except Exception as e:
        return handle_error(e)


@router.delete("/{policy_id}", status_code=204)
async def delete_policy(policy_id: str):
    """
    Delete a policy permanently.

    Raises:
        404: Policy not found
    """
    try:
        get_policy_service().delete(policy_id)
        return None  # 204 No Content
    except Exception as e:
        return handle_error(e)
