"""
Policy service for business logic operations.

Also acts as the policy-create collaborator for bulk uploads via
create_from_upload().
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.policy import (
    PolicyCreate,
    PolicyUpdate,
    PolicyResponse,
    PolicyStatus,
)
from services.customer_service import CustomerService, get_customer_service
from services.sub_agent_service import SubAgentService, get_sub_agent_service
from exceptions import (
    PolicyNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


class PolicyService:
    """
    Policy business logic.

    Handles CRUD operations for policies. Creating a policy also links
    (or creates) the matching customer and refreshes the sub agent's
    totals; neither side effect can fail the insert.
    """

    def __init__(
        self,
        customer_service: Optional[CustomerService] = None,
        sub_agent_service: Optional[SubAgentService] = None
    ):
        self.db = get_supabase_client()
        self.table = "policies"
        self._customer_service = customer_service
        self._sub_agent_service = sub_agent_service

    @property
    def customers(self) -> CustomerService:
        if self._customer_service is None:
            self._customer_service = get_customer_service()
        return self._customer_service

    @property
    def sub_agents(self) -> SubAgentService:
        if self._sub_agent_service is None:
            self._sub_agent_service = get_sub_agent_service()
        return self._sub_agent_service

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 20,
        status: Optional[PolicyStatus] = None,
        insurance_company: Optional[str] = None,
        search: Optional[str] = None
    ) -> tuple[list[PolicyResponse], int]:
        """
        Get an agent's policies with optional filters.

        Args:
            user_id: Owning agent
            page: Page number (1-indexed)
            page_size: Items per page
            status: Filter by status
            insurance_company: Filter by company (exact)
            search: Matches policyholder name or policy number

        Returns:
            Tuple of (policies list, total count)
        """
        logger.info(
            "getting_policies",
            user_id=user_id,
            page=page,
            page_size=page_size,
            status=status
        )

        try:
            query = (
                self.db.table(self.table)
                .select("*", count="exact")
                .eq("user_id", user_id)
            )

            if status:
                query = query.eq("status", status.value)
            if insurance_company:
                query = query.eq("insurance_company", insurance_company)
            if search:
                pattern = f"%{search.strip()}%"
                query = query.or_(
                    f"policyholder_name.ilike.{pattern},policy_number.ilike.{pattern}"
                )

            offset = (page - 1) * page_size
            query = query.range(offset, offset + page_size - 1)
            query = query.order("created_at", desc=True)

            result = query.execute()

            policies = [PolicyResponse(**row) for row in result.data]
            total = result.count or 0

            logger.info("policies_retrieved", count=len(policies), total=total)

            return policies, total

        except Exception as e:
            logger.error("get_policies_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, policy_id: str) -> PolicyResponse:
        """
        Get a single policy by ID.

        Raises:
            PolicyNotFoundError: If policy doesn't exist
        """
        logger.debug("getting_policy", policy_id=policy_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", policy_id)
                .single()
                .execute()
            )

            if not result.data:
                raise PolicyNotFoundError(policy_id)

            return PolicyResponse(**result.data)

        except PolicyNotFoundError:
            raise
        except Exception as e:
            logger.error("get_policy_failed", policy_id=policy_id, error=str(e))
            # PostgREST reports a missing row from .single() as an error
            if "0 rows" in str(e) or "no rows" in str(e).lower():
                raise PolicyNotFoundError(policy_id)
            raise DatabaseError("select", str(e))

    def count_by_user(self) -> dict[str, int]:
        """Number of policies per owning agent (admin panel)."""
        try:
            result = self.db.table(self.table).select("user_id").execute()
        except Exception as e:
            logger.error("count_policies_failed", error=str(e))
            raise DatabaseError("select", str(e))

        counts: dict[str, int] = {}
        for row in result.data:
            counts[row["user_id"]] = counts.get(row["user_id"], 0) + 1
        return counts

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(
        self,
        data: PolicyCreate,
        user_id: str,
        user_display_name: Optional[str] = None
    ) -> PolicyResponse:
        """
        Create a new policy.

        Args:
            data: Policy creation data
            user_id: Owning agent
            user_display_name: Shown as "created by" on the policy

        Returns:
            Created PolicyResponse
        """
        logger.info(
            "creating_policy",
            user_id=user_id,
            policy_number=data.policy_number
        )

        customer_id = self.customers.find_or_create_from_policy(
            user_id,
            data.policyholder_name,
            data.contact_no,
            data.email_id
        )

        insert_data = data.model_dump(mode="json")
        insert_data["user_id"] = user_id
        insert_data["customer_id"] = customer_id
        insert_data["created_by_name"] = user_display_name

        try:
            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )

            policy = PolicyResponse(**result.data[0])

        except Exception as e:
            logger.error(
                "create_policy_failed",
                policy_number=data.policy_number,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

        logger.info(
            "policy_created",
            policy_id=policy.id,
            policy_number=policy.policy_number
        )

        if policy.sub_agent_id:
            self._refresh_sub_agent_stats(policy.sub_agent_id)

        return policy

    def create_from_upload(
        self,
        data: PolicyCreate,
        owner_id: str,
        owner_display_name: Optional[str] = None
    ) -> str:
        """Insert one bulk-upload row and return the new policy ID."""
        return self.create(data, owner_id, owner_display_name).id

    def update(self, policy_id: str, data: PolicyUpdate) -> PolicyResponse:
        """
        Update an existing policy. Only provided fields are written.

        Raises:
            PolicyNotFoundError: If policy doesn't exist
        """
        logger.info("updating_policy", policy_id=policy_id)

        existing = self.get_by_id(policy_id)

        update_data = data.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", policy_id)
                .execute()
            )

            policy = PolicyResponse(**result.data[0])

        except Exception as e:
            logger.error("update_policy_failed", policy_id=policy_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info(
            "policy_updated",
            policy_id=policy_id,
            fields=list(update_data.keys())
        )

        # Totals move with the policy when it changes hands or amounts
        for sub_agent_id in {existing.sub_agent_id, policy.sub_agent_id}:
            if sub_agent_id:
                self._refresh_sub_agent_stats(sub_agent_id)

        return policy

    def delete(self, policy_id: str) -> bool:
        """
        Permanently delete a policy.

        Raises:
            PolicyNotFoundError: If policy doesn't exist
        """
        logger.info("deleting_policy", policy_id=policy_id)

        existing = self.get_by_id(policy_id)

        try:
            self.db.table(self.table).delete().eq("id", policy_id).execute()
        except Exception as e:
            logger.error("delete_policy_failed", policy_id=policy_id, error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("policy_deleted", policy_id=policy_id)

        if existing.sub_agent_id:
            self._refresh_sub_agent_stats(existing.sub_agent_id)

        return True

    # ===================
    # HELPERS
    # ===================

    def _refresh_sub_agent_stats(self, sub_agent_id: str) -> None:
        try:
            self.sub_agents.update_stats(sub_agent_id)
        except DatabaseError as e:
            logger.warning(
                "sub_agent_stats_refresh_failed",
                sub_agent_id=sub_agent_id,
                error=e.message
            )


# Singleton instance for convenience
_policy_service: Optional[PolicyService] = None

def get_policy_service() -> PolicyService:
    """Get or create PolicyService instance."""
    global _policy_service
    if _policy_service is None:
        _policy_service = PolicyService()
    return _policy_service
