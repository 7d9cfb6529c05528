"""
Customer API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListResponse,
)
from services.customer_service import get_customer_service
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


@router.get("", response_model=CustomerListResponse)
async def list_customers(user_id: str = Query(..., description="Owning agent")):
    """Active customers of an agent, by name."""
    try:
        customers = get_customer_service().get_all(user_id)
        return CustomerListResponse(data=customers, total=len(customers))
    except Exception as e:
        return handle_error(e)


@router.get("/birthdays", response_model=list[CustomerResponse])
async def upcoming_birthdays(
    user_id: str = Query(..., description="Owning agent"),
    days: Optional[int] = Query(None, ge=1, le=365, description="Look-ahead window")
):
    """Customers with a birthday in the next `days` days, soonest first."""
    try:
        return get_customer_service().get_upcoming_birthdays(user_id, days=days)
    except Exception as e:
        return handle_error(e)


@router.get("/anniversaries", response_model=list[CustomerResponse])
async def upcoming_anniversaries(
    user_id: str = Query(..., description="Owning agent"),
    days: Optional[int] = Query(None, ge=1, le=365, description="Look-ahead window")
):
    """Customers with an anniversary in the next `days` days, soonest first."""
    try:
        return get_customer_service().get_upcoming_anniversaries(user_id, days=days)
    except Exception as e:
        return handle_error(e)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: str):
    """
    Raises:
        404: Customer not found
    """
    try:
        return get_customer_service().get_by_id(customer_id)
    except Exception as e:
        return handle_error(e)


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    data: CustomerCreate,
    user_id: str = Query(..., description="Owning agent")
):
    try:
        return get_customer_service().create(user_id, data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(customer_id: str, data: CustomerUpdate):
    """
    Raises:
        404: Customer not found
    """
    try:
        return get_customer_service().update(customer_id, data)
    except Exception as e:
        return handle_error(e)


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(customer_id: str):
    """Deactivate a customer (soft delete)."""
    try:
        get_customer_service().delete(customer_id)
        return None
    except Exception as e:
        return handle_error(e)
