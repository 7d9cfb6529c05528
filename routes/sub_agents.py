"""
Sub agent API routes, including the sub agent portal login.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.sub_agent import (
    SubAgentCreate,
    SubAgentUpdate,
    SubAgentResponse,
    SubAgentLogin,
    SubAgentStats,
)
from services.sub_agent_service import get_sub_agent_service
from exceptions import (
    AppError,
    SubAgentNotFoundError,
    InvalidCredentialsError
)

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

@router.get("", response_model=list[SubAgentResponse])
async def list_sub_agents(user_id: str = Query(..., description="Owning agent")):
    try:
        return get_sub_agent_service().get_all(user_id)
    except Exception as e:
        return handle_error(e)


@router.post("/login", response_model=SubAgentResponse)
async def login(data: SubAgentLogin):
    """
    Sub agent portal sign-in.

    Raises:
        401: Unknown email, wrong password, or inactive sub agent
    """
    try:
        sub_agent = get_sub_agent_service().authenticate(data.login_email, data.password)
        if sub_agent is None:
            raise InvalidCredentialsError()
        return sub_agent
    except Exception as e:
        return handle_error(e)


@router.get("/{sub_agent_id}", response_model=SubAgentResponse)
async def get_sub_agent(sub_agent_id: str):
    """
    Raises:
        404: Sub agent not found
    """
    try:
        sub_agent = get_sub_agent_service().get_by_id(sub_agent_id)
        if sub_agent is None:
            raise SubAgentNotFoundError(sub_agent_id)
        return sub_agent
    except Exception as e:
        return handle_error(e)


@router.get("/{sub_agent_id}/policies")
async def get_sub_agent_policies(
    sub_agent_id: str,
    month: Optional[int] = Query(None, ge=1, le=12, description="Used together with year"),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    insurance_company: Optional[str] = Query(None),
    product_type: Optional[str] = Query(None)
):
    """Policies sold through this sub agent, newest first."""
    try:
        return get_sub_agent_service().get_policies(
            sub_agent_id,
            month=month,
            year=year,
            insurance_company=insurance_company,
            product_type=product_type
        )
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=SubAgentResponse, status_code=201)
async def create_sub_agent(data: SubAgentCreate):
    try:
        return get_sub_agent_service().create(data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{sub_agent_id}", response_model=SubAgentResponse)
async def update_sub_agent(sub_agent_id: str, data: SubAgentUpdate):
    """
    Raises:
        404: Sub agent not found
    """
    try:
        return get_sub_agent_service().update(sub_agent_id, data)
    except Exception as e:
        return handle_error(e)


@router.delete("/{sub_agent_id}", status_code=204)
async def delete_sub_agent(sub_agent_id: str):
    """
    Raises:
        404: Sub agent not found
    """
    try:
        get_sub_agent_service().delete(sub_agent_id)
        return None
    except Exception as e:
        return handle_error(e)


@router.post("/{sub_agent_id}/stats", response_model=SubAgentStats)
async def refresh_stats(sub_agent_id: str):
    """Recompute policy count, premium and commission totals."""
    try:
        return get_sub_agent_service().update_stats(sub_agent_id)
    except Exception as e:
        return handle_error(e)
