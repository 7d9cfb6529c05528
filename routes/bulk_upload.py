"""
Bulk policy upload routes.

GET  /template  - blank CSV with the expected headers and an example row
POST /policies  - upload a filled CSV; every row is reported individually
"""

from fastapi import APIRouter, UploadFile, File, Form
from fastapi.responses import JSONResponse, Response
from typing import Optional
import structlog

from models.bulk_upload import BulkUploadResponse
from parsers.policy_template import generate_csv_template, template_filename
from services.bulk_upload_service import get_bulk_upload_service, check_upload_file
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/bulk-upload", tags=["Bulk Upload"])


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

@router.get("/template")
async def download_template():
    """CSV template: header row, required/optional row, example row."""
    filename = template_filename()
    return Response(
        content=generate_csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/policies", response_model=BulkUploadResponse)
async def upload_policies(
    file: UploadFile = File(..., description="Filled-in policy CSV"),
    user_id: str = Form(..., description="Agent the policies belong to"),
    user_display_name: Optional[str] = Form(None, description="Recorded as created by")
):
    """
    Create one policy per CSV row.

    Rows that fail validation or insert are reported with their
    spreadsheet line number; the other rows are still created.

    Raises:
        422: Not a CSV, too large, or no data rows
    """
    try:
        content = await file.read()
        check_upload_file(file.filename, file.content_type, len(content))

        logger.info(
            "bulk_upload_received",
            filename=file.filename,
            size=len(content),
            user_id=user_id
        )

        result = get_bulk_upload_service().upload_file(
            content,
            owner_id=user_id,
            owner_display_name=user_display_name
        )

        return result.to_dict()

    except Exception as e:
        return handle_error(e)
