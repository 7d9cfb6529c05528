"""
AI upload quota service.

Counting lives in two database functions:
- get_user_ai_quota(p_user_id): usage for the current month
- increment_user_ai_uploads(p_user_id): counts one successful extraction

Only successful extractions are recorded; a failed extraction must never
consume quota.
"""

from typing import Optional, Union
import structlog

from config import get_supabase_client
from models.ai_upload import (
    AIQuotaStatus,
    AIUploadEligibility,
    AIUploadRecordRequest,
    AIUploadRecordResponse,
    PlanLimit,
)
from exceptions import (
    AIQuotaExceededError,
    ExternalServiceError,
    UserNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


# Monthly price (INR) -> AI extractions per month
PLAN_LIMITS: dict[int, int] = {
    199: 0,
    499: 25,
    799: 100,
    1499: 300,
    2499: 800,
}

PLAN_DESCRIPTIONS: dict[int, str] = {
    199: "No AI Policy Upload",
    499: "AI Upload 25/Month",
    799: "AI Upload 100/Month",
    1499: "AI Upload 300/Month",
    2499: "AI Upload 800/Month",
}

DEFAULT_PLAN = 199


def _plan_number(plan: Union[int, str, None]) -> Optional[int]:
    try:
        return int(str(plan).strip())
    except (TypeError, ValueError):
        return None


def get_plan_limit(plan: Union[int, str, None]) -> int:
    """Monthly AI upload limit for a plan. Unknown plans get none."""
    return PLAN_LIMITS.get(_plan_number(plan), 0)


def get_plan_description(plan: Union[int, str, None]) -> str:
    return PLAN_DESCRIPTIONS.get(_plan_number(plan), "View AI limits")


def list_plan_limits() -> list[PlanLimit]:
    return [
        PlanLimit(plan=plan, monthly_limit=limit, description=PLAN_DESCRIPTIONS[plan])
        for plan, limit in PLAN_LIMITS.items()
    ]


def format_quota(quota: AIQuotaStatus) -> str:
    """One-line usage summary, e.g. '3/25 AI uploads used'."""
    if quota.monthly_limit == 0:
        return "No AI uploads available"
    return f"{quota.uploads_used}/{quota.monthly_limit} AI uploads used"


class AIUploadService:
    """Checks and records AI policy extractions against plan quotas."""

    def __init__(self):
        self.db = get_supabase_client()

    def get_quota(self, user_id: str) -> Optional[AIQuotaStatus]:
        """
        Current month's usage.

        Returns:
            AIQuotaStatus, or None if the quota function is unavailable
        """
        try:
            result = self.db.rpc("get_user_ai_quota", {"p_user_id": user_id}).execute()
        except Exception as e:
            logger.error("get_ai_quota_failed", user_id=user_id, error=str(e))
            return None

        if not result.data:
            logger.warning("ai_quota_missing", user_id=user_id)
            return None

        row = result.data[0]
        return AIQuotaStatus(
            uploads_used=row.get("uploads_used") or 0,
            monthly_limit=row.get("monthly_limit") or 0,
            remaining_uploads=row.get("remaining_uploads") or 0,
            subscription_plan=_plan_number(row.get("subscription_plan")) or DEFAULT_PLAN,
            reset_date=row.get("reset_date"),
        )

    def check_can_upload(self, user_id: str) -> AIUploadEligibility:
        """Call before starting an extraction."""
        quota = self.get_quota(user_id)

        if quota is None:
            return AIUploadEligibility(
                can_upload=False,
                reason="Unable to fetch quota information"
            )

        if quota.monthly_limit == 0:
            return AIUploadEligibility(
                can_upload=False,
                reason="Your plan does not include AI uploads. Please upgrade."
            )

        if quota.uploads_used >= quota.monthly_limit:
            return AIUploadEligibility(
                can_upload=False,
                reason=(
                    f"Monthly limit reached ({quota.monthly_limit} uploads). "
                    "Resets on the 1st."
                ),
                limit=quota.monthly_limit
            )

        return AIUploadEligibility(
            can_upload=True,
            reason=f"You have {quota.remaining_uploads} uploads remaining",
            remaining=quota.remaining_uploads,
            limit=quota.monthly_limit
        )

    def record_successful_upload(self, request: AIUploadRecordRequest) -> AIUploadRecordResponse:
        """
        Count one successful extraction.

        Raises:
            UserNotFoundError: Unknown user
            ExternalServiceError: Quota functions unavailable
            AIQuotaExceededError: Plan has no AI uploads or month is used up
        """
        user_id = request.user_id
        logger.info("recording_ai_upload", user_id=user_id, source=request.extraction_source)

        try:
            user = (
                self.db.table("users")
                .select("id, subscription_plan")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_user_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not user.data:
            raise UserNotFoundError(user_id)

        quota = self.get_quota(user_id)
        if quota is None:
            raise ExternalServiceError("ai_quota", "Unable to check quota")

        if quota.monthly_limit == 0:
            raise AIQuotaExceededError(
                "User subscription does not include AI uploads",
                limit=0,
                used=quota.uploads_used
            )
        if quota.uploads_used >= quota.monthly_limit:
            raise AIQuotaExceededError(
                "Monthly AI upload quota exceeded",
                limit=quota.monthly_limit,
                used=quota.uploads_used
            )

        try:
            result = self.db.rpc("increment_user_ai_uploads", {"p_user_id": user_id}).execute()
        except Exception as e:
            logger.error("increment_ai_uploads_failed", user_id=user_id, error=str(e))
            raise ExternalServiceError("ai_quota", "Failed to record upload")

        if not result.data:
            raise ExternalServiceError("ai_quota", "Failed to record upload")

        row = result.data[0]
        if not row.get("success"):
            logger.warning("ai_upload_not_recorded", user_id=user_id, message=row.get("message"))
            return AIUploadRecordResponse(
                success=False,
                message=row.get("message") or "Failed to record upload",
                uploads_used=row.get("uploads_used") or 0,
                remaining_uploads=row.get("remaining") or 0,
            )

        remaining = row.get("remaining") or 0
        self._log_activity(request, user.data[0].get("subscription_plan"), remaining)

        logger.info("ai_upload_recorded", user_id=user_id, remaining=remaining)

        return AIUploadRecordResponse(
            success=True,
            message="AI upload recorded successfully",
            uploads_used=row.get("uploads_used") or 0,
            remaining_uploads=remaining,
        )

    def _log_activity(
        self,
        request: AIUploadRecordRequest,
        subscription_plan,
        remaining: int
    ) -> None:
        """Audit row in ai_upload_logs. Failure here never fails the upload."""
        try:
            self.db.table("ai_upload_logs").insert({
                "user_id": request.user_id,
                "policy_number": request.policy_number,
                "insurance_company": request.insurance_company,
                "policyholder_name": request.policyholder_name,
                "extraction_source": request.extraction_source,
                "subscription_plan": subscription_plan,
                "remaining_quota": remaining,
            }).execute()
        except Exception as e:
            logger.warning("ai_upload_log_failed", user_id=request.user_id, error=str(e))


# Singleton instance for convenience
_ai_upload_service: Optional[AIUploadService] = None

def get_ai_upload_service() -> AIUploadService:
    """Get or create AIUploadService instance."""
    global _ai_upload_service
    if _ai_upload_service is None:
        _ai_upload_service = AIUploadService()
    return _ai_upload_service
