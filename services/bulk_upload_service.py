"""
Bulk policy upload.

Runs an uploaded CSV through parse -> map -> validate -> create, one row
at a time. A structurally broken file aborts before anything is written.
After that every row stands alone: a row that fails validation, or whose
insert raises, is recorded as a failure and the next row is processed.
There is no batch transaction and no retry; agents fix the failed rows
(identified by spreadsheet line number) and upload them again.
"""

from dataclasses import dataclass, field
import threading
from typing import Callable, Optional, Protocol
import structlog

from config import settings
from models.policy import PolicyCreate
from parsers.policy_csv_parser import RawRow, parse_policy_csv, read_upload_text
from parsers.policy_row_mapper import (
    build_policy_create,
    map_row,
    validate_policy_record,
)
from services.policy_service import get_policy_service
from exceptions import BulkUploadCancelledError, InvalidUploadFileError

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, int], None]

UNKNOWN_ERROR = "Unknown error occurred"

# Header is line 1 and spreadsheets count from 1
FIRST_DATA_LINE = 2


class PolicyCreator(Protocol):
    """Anything that can persist one policy and return its ID."""

    def create_from_upload(
        self,
        data: PolicyCreate,
        owner_id: str,
        owner_display_name: Optional[str] = None
    ) -> str:
        ...


# ===================
# RESULTS
# ===================

@dataclass
class RowResult:
    """
    Outcome of one data row.

    Exactly one of policy_id (success) or error (failure) is set. The
    original cells are always kept so failures can be shown in context.
    """
    row_index: int
    success: bool
    data: RawRow
    policy_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, row_index: int, policy_id: str, data: RawRow) -> "RowResult":
        return cls(row_index=row_index, success=True, data=data, policy_id=policy_id)

    @classmethod
    def failed(cls, row_index: int, error: str, data: RawRow) -> "RowResult":
        return cls(row_index=row_index, success=False, data=data, error=error)

    def to_dict(self) -> dict:
        return {
            "row_index": self.row_index,
            "success": self.success,
            "policy_id": self.policy_id,
            "error": self.error,
            "data": self.data,
        }


@dataclass
class BatchResult:
    """Aggregate outcome of one upload. Counts always match results."""
    total_rows: int = 0
    success_count: int = 0
    failure_count: int = 0
    results: list[RowResult] = field(default_factory=list)

    def record(self, row_result: RowResult) -> None:
        """Append a row outcome and bump the matching counter."""
        if row_result.success:
            self.success_count += 1
        else:
            self.failure_count += 1
        self.results.append(row_result)

    @property
    def failures(self) -> list[RowResult]:
        return [r for r in self.results if not r.success]

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "total_rows": self.total_rows,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "results": [r.to_dict() for r in self.results],
        }


# ===================
# FILE CHECKS
# ===================

def check_upload_file(
    filename: Optional[str],
    content_type: Optional[str],
    size: int
) -> None:
    """
    Reject files that are not CSV or are too large to process.

    Raises:
        InvalidUploadFileError: With the reason shown to the agent
    """
    is_csv = content_type == "text/csv" or (filename or "").lower().endswith(".csv")
    if not is_csv:
        raise InvalidUploadFileError(filename, "Please upload a CSV file")

    if size > settings.bulk_upload_max_bytes:
        raise InvalidUploadFileError(
            filename,
            f"File is larger than {settings.bulk_upload_max_bytes // (1024 * 1024)} MB"
        )


# ===================
# SERVICE
# ===================

class BulkUploadService:
    """
    Sequential bulk policy ingestion.

    Usage:
        service = BulkUploadService(get_policy_service())
        result = service.run(csv_text, owner_id="user-1")
    """

    def __init__(self, policy_creator: Optional[PolicyCreator] = None):
        self._policy_creator = policy_creator

    @property
    def policy_creator(self) -> PolicyCreator:
        if self._policy_creator is None:
            self._policy_creator = get_policy_service()
        return self._policy_creator

    def upload_file(
        self,
        content: bytes,
        owner_id: str,
        owner_display_name: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> BatchResult:
        """Decode uploaded bytes and run the upload."""
        text = read_upload_text(content)
        return self.run(text, owner_id, owner_display_name, progress, cancel_event)

    def run(
        self,
        text: str,
        owner_id: str,
        owner_display_name: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> BatchResult:
        """
        Ingest every data row of a CSV.

        Args:
            text: CSV file contents
            owner_id: Agent the policies belong to
            owner_display_name: Recorded as "created by"
            progress: Called with (rows_done, total_rows) after each row
            cancel_event: When set, stops before the next row

        Returns:
            BatchResult with one RowResult per data row

        Raises:
            CSVFormatError: No header or no data rows (nothing is written)
            BulkUploadCancelledError: cancel_event was set mid-upload;
                rows already created are kept
        """
        rows = parse_policy_csv(text)

        result = BatchResult(total_rows=len(rows))

        logger.info(
            "bulk_upload_started",
            owner_id=owner_id,
            total_rows=result.total_rows
        )

        for i, row in enumerate(rows):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(
                    "bulk_upload_cancelled",
                    owner_id=owner_id,
                    processed=i,
                    total_rows=result.total_rows
                )
                raise BulkUploadCancelledError(
                    processed=i,
                    total_rows=result.total_rows,
                    success_count=result.success_count,
                    failure_count=result.failure_count
                )

            row_result = self._process_row(
                i + FIRST_DATA_LINE,
                row,
                owner_id,
                owner_display_name
            )
            result.record(row_result)

            if progress is not None:
                progress(i + 1, result.total_rows)

        logger.info(
            "bulk_upload_complete",
            owner_id=owner_id,
            total_rows=result.total_rows,
            success_count=result.success_count,
            failure_count=result.failure_count
        )

        return result

    def _process_row(
        self,
        row_index: int,
        row: RawRow,
        owner_id: str,
        owner_display_name: Optional[str]
    ) -> RowResult:
        """Map, validate, and insert one row. Never raises."""
        try:
            record = map_row(row)

            validation = validate_policy_record(record)
            if not validation.valid:
                logger.debug(
                    "bulk_upload_row_invalid",
                    row_index=row_index,
                    errors=list(validation.errors)
                )
                return RowResult.failed(row_index, validation.message(), row)

            policy = build_policy_create(record)
            policy_id = self.policy_creator.create_from_upload(
                policy,
                owner_id,
                owner_display_name
            )

            return RowResult.succeeded(row_index, policy_id, row)

        except Exception as e:
            # One bad row must not stop the rest of the file
            logger.warning(
                "bulk_upload_row_failed",
                row_index=row_index,
                error=str(e),
                error_type=type(e).__name__
            )
            return RowResult.failed(row_index, str(e) or UNKNOWN_ERROR, row)


def get_bulk_upload_service() -> BulkUploadService:
    """BulkUploadService wired to the shared PolicyService."""
    return BulkUploadService()
