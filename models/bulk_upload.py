"""
Bulk upload response schemas.

These mirror the BatchResult / RowResult dataclasses produced by the
bulk upload service so FastAPI can document the response.
"""

from typing import Optional

from models.base import BaseSchema


class RowResultResponse(BaseSchema):
    row_index: int
    success: bool
    policy_id: Optional[str] = None
    error: Optional[str] = None
    data: dict[str, str]


class BulkUploadResponse(BaseSchema):
    total_rows: int
    success_count: int
    failure_count: int
    results: list[RowResultResponse]
