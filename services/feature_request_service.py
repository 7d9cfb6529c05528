"""
Feature request service.

Agents submit requests; admins triage them (status, priority, notes).
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.feature_request import (
    FeatureRequestCreate,
    FeatureRequestUpdate,
    FeatureRequestResponse,
    FeatureRequestStatus,
    FeatureRequestPriority,
)
from exceptions import (
    FeatureRequestNotFoundError,
    UserNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


class FeatureRequestService:

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "feature_requests"

    def create(self, user_id: str, data: FeatureRequestCreate) -> FeatureRequestResponse:
        """
        Submit a feature request.

        The requester's display name and email are copied from their
        profile so the admin list needs no join.

        Raises:
            UserNotFoundError: No profile row for user_id
        """
        logger.info("creating_feature_request", user_id=user_id)

        try:
            profile = (
                self.db.table("users")
                .select("display_name, email")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_user_profile_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not profile.data:
            raise UserNotFoundError(user_id)

        user = profile.data[0]

        try:
            result = (
                self.db.table(self.table)
                .insert({
                    "user_id": user_id,
                    "user_name": user.get("display_name"),
                    "user_email": user.get("email"),
                    "title": data.title,
                    "description": data.description,
                    "status": FeatureRequestStatus.PENDING.value,
                    "priority": FeatureRequestPriority.MEDIUM.value,
                })
                .execute()
            )

            request = FeatureRequestResponse(**result.data[0])

            logger.info("feature_request_created", request_id=request.id)

            return request

        except Exception as e:
            logger.error("create_feature_request_failed", user_id=user_id, error=str(e))
            raise DatabaseError("insert", str(e))

    def get_for_user(self, user_id: str) -> list[FeatureRequestResponse]:
        """An agent's own requests, newest first."""
        return self._list(user_id)

    def get_all(self) -> list[FeatureRequestResponse]:
        """Every request, newest first (admin)."""
        return self._list(None)

    def _list(self, user_id: Optional[str]) -> list[FeatureRequestResponse]:
        try:
            query = self.db.table(self.table).select("*")
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.order("created_at", desc=True).execute()

            return [FeatureRequestResponse(**row) for row in result.data]

        except Exception as e:
            logger.error("get_feature_requests_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

    def update(self, request_id: str, data: FeatureRequestUpdate) -> FeatureRequestResponse:
        """
        Admin triage. Only provided fields are written.

        Raises:
            FeatureRequestNotFoundError: If the request doesn't exist
        """
        logger.info("updating_feature_request", request_id=request_id)

        update_data = data.model_dump(mode="json", exclude_unset=True)

        try:
            if update_data:
                result = (
                    self.db.table(self.table)
                    .update(update_data)
                    .eq("id", request_id)
                    .execute()
                )
            else:
                result = (
                    self.db.table(self.table)
                    .select("*")
                    .eq("id", request_id)
                    .execute()
                )
        except Exception as e:
            logger.error("update_feature_request_failed", request_id=request_id, error=str(e))
            raise DatabaseError("update", str(e))

        if not result.data:
            raise FeatureRequestNotFoundError(request_id)

        return FeatureRequestResponse(**result.data[0])

    def delete(self, request_id: str) -> bool:
        """Remove a request (admin)."""
        logger.info("deleting_feature_request", request_id=request_id)

        try:
            self.db.table(self.table).delete().eq("id", request_id).execute()
            return True

        except Exception as e:
            logger.error("delete_feature_request_failed", request_id=request_id, error=str(e))
            raise DatabaseError("delete", str(e))


# Singleton instance for convenience
_feature_request_service: Optional[FeatureRequestService] = None

def get_feature_request_service() -> FeatureRequestService:
    """Get or create FeatureRequestService instance."""
    global _feature_request_service
    if _feature_request_service is None:
        _feature_request_service = FeatureRequestService()
    return _feature_request_service
