"""
Sub agent service for business logic operations.

Sub agents can sign in to a read-only portal. Their passwords are stored
as an unsalted SHA-256 hex digest because existing rows were written that
way; changing the scheme would lock every sub agent out.
"""

from datetime import date
import hashlib
from typing import Optional
import structlog

from config import get_supabase_client
from models.sub_agent import (
    SubAgentCreate,
    SubAgentUpdate,
    SubAgentResponse,
    SubAgentStats,
)
from exceptions import (
    SubAgentNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


def hash_password(password: str) -> str:
    """SHA-256 hex digest of the UTF-8 password."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def _to_float(value) -> float:
    """Numeric text columns may hold '', None, or junk typed by hand."""
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def policy_premium(policy: dict) -> float:
    """Premium credited to a sub agent: total, else net, else base premium."""
    raw = (
        policy.get("total_premium")
        or policy.get("net_premium")
        or policy.get("premium_amount")
    )
    return _to_float(raw)


def _start_date(policy: dict) -> Optional[date]:
    raw = policy.get("policy_start_date")
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        return None


class SubAgentService:
    """
    Sub agent business logic.

    Handles CRUD, portal login, and per-agent policy statistics.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "sub_agents"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self, user_id: str) -> list[SubAgentResponse]:
        """Get all sub agents of an agent, ordered by name."""
        logger.info("getting_sub_agents", user_id=user_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .order("sub_agent_name")
                .execute()
            )

            return [SubAgentResponse(**row) for row in result.data]

        except Exception as e:
            logger.error("get_sub_agents_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, sub_agent_id: str) -> Optional[SubAgentResponse]:
        """
        Get a single sub agent.

        Returns:
            SubAgentResponse or None if not found
        """
        logger.debug("getting_sub_agent", sub_agent_id=sub_agent_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", sub_agent_id)
                .limit(1)
                .execute()
            )

            if not result.data:
                return None

            return SubAgentResponse(**result.data[0])

        except Exception as e:
            logger.error("get_sub_agent_failed", sub_agent_id=sub_agent_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_policies(
        self,
        sub_agent_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
        insurance_company: Optional[str] = None,
        product_type: Optional[str] = None
    ) -> list[dict]:
        """
        Policies sold through a sub agent, newest first.

        Args:
            sub_agent_id: Sub agent UUID
            month: 1-12, only applied together with year
            year: Filter on policy start date year
            insurance_company: Exact match
            product_type: Exact match

        Returns:
            Raw policy rows
        """
        logger.info(
            "getting_sub_agent_policies",
            sub_agent_id=sub_agent_id,
            month=month,
            year=year
        )

        try:
            query = (
                self.db.table("policies")
                .select("*")
                .eq("sub_agent_id", sub_agent_id)
            )
            if insurance_company:
                query = query.eq("insurance_company", insurance_company)
            if product_type:
                query = query.eq("product_type", product_type)

            result = query.order("created_at", desc=True).execute()

        except Exception as e:
            logger.error("get_sub_agent_policies_failed", sub_agent_id=sub_agent_id, error=str(e))
            raise DatabaseError("select", str(e))

        policies = result.data or []

        # Start dates are stored as text, so month/year filtering happens here
        if year is not None:
            filtered = []
            for policy in policies:
                start = _start_date(policy)
                if start is None or start.year != year:
                    continue
                if month is not None and start.month != month:
                    continue
                filtered.append(policy)
            policies = filtered

        return policies

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: SubAgentCreate) -> SubAgentResponse:
        """
        Create a sub agent.

        Login email and password hash are stored only when both are given.
        """
        logger.info("creating_sub_agent", user_id=data.user_id)

        insert_data = {
            "user_id": data.user_id,
            "sub_agent_name": data.sub_agent_name,
            "contact_no": data.contact_no,
            "email_id": data.email_id,
            "address": data.address,
            "notes": data.notes,
            "is_active": True,
        }
        if data.login_email and data.password:
            insert_data["login_email"] = data.login_email
            insert_data["password_hash"] = hash_password(data.password)

        try:
            result = self.db.table(self.table).insert(insert_data).execute()

            sub_agent = SubAgentResponse(**result.data[0])

            logger.info("sub_agent_created", sub_agent_id=sub_agent.id)

            return sub_agent

        except Exception as e:
            logger.error("create_sub_agent_failed", user_id=data.user_id, error=str(e))
            raise DatabaseError("insert", str(e))

    def update(self, sub_agent_id: str, data: SubAgentUpdate) -> SubAgentResponse:
        """
        Update a sub agent. A new password is hashed before storage.

        Raises:
            SubAgentNotFoundError: If sub agent doesn't exist
        """
        logger.info("updating_sub_agent", sub_agent_id=sub_agent_id)

        existing = self.get_by_id(sub_agent_id)
        if existing is None:
            raise SubAgentNotFoundError(sub_agent_id)

        update_data = data.model_dump(exclude_unset=True, exclude={"password"})
        if data.password:
            update_data["password_hash"] = hash_password(data.password)

        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", sub_agent_id)
                .execute()
            )

            logger.info(
                "sub_agent_updated",
                sub_agent_id=sub_agent_id,
                fields=[k for k in update_data if k != "password_hash"]
            )

            return SubAgentResponse(**result.data[0])

        except Exception as e:
            logger.error("update_sub_agent_failed", sub_agent_id=sub_agent_id, error=str(e))
            raise DatabaseError("update", str(e))

    def delete(self, sub_agent_id: str) -> bool:
        """
        Permanently delete a sub agent.

        Raises:
            SubAgentNotFoundError: If sub agent doesn't exist
        """
        logger.info("deleting_sub_agent", sub_agent_id=sub_agent_id)

        if self.get_by_id(sub_agent_id) is None:
            raise SubAgentNotFoundError(sub_agent_id)

        try:
            self.db.table(self.table).delete().eq("id", sub_agent_id).execute()

            logger.info("sub_agent_deleted", sub_agent_id=sub_agent_id)

            return True

        except Exception as e:
            logger.error("delete_sub_agent_failed", sub_agent_id=sub_agent_id, error=str(e))
            raise DatabaseError("delete", str(e))

    def update_stats(self, sub_agent_id: str) -> SubAgentStats:
        """
        Recompute a sub agent's policy count, premium and commission totals.

        Returns:
            The totals written to the sub agent row
        """
        logger.info("updating_sub_agent_stats", sub_agent_id=sub_agent_id)

        try:
            result = (
                self.db.table("policies")
                .select("premium_amount, net_premium, total_premium, sub_agent_commission_amount")
                .eq("sub_agent_id", sub_agent_id)
                .execute()
            )

            policies = result.data or []
            stats = SubAgentStats(
                sub_agent_id=sub_agent_id,
                total_policies=len(policies),
                total_premium_amount=sum(policy_premium(p) for p in policies),
                total_commission=sum(
                    _to_float(p.get("sub_agent_commission_amount")) for p in policies
                ),
            )

            self.db.table(self.table).update({
                "total_policies": stats.total_policies,
                "total_premium_amount": stats.total_premium_amount,
                "total_commission": stats.total_commission,
            }).eq("id", sub_agent_id).execute()

            logger.info(
                "sub_agent_stats_updated",
                sub_agent_id=sub_agent_id,
                total_policies=stats.total_policies
            )

            return stats

        except Exception as e:
            logger.error("update_sub_agent_stats_failed", sub_agent_id=sub_agent_id, error=str(e))
            raise DatabaseError("update", str(e))

    # ===================
    # PORTAL LOGIN
    # ===================

    def authenticate(self, login_email: str, password: str) -> Optional[SubAgentResponse]:
        """
        Check sub agent portal credentials.

        Returns:
            The active sub agent, or None if the credentials don't match
        """
        logger.info("authenticating_sub_agent", login_email=login_email)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("login_email", login_email)
                .eq("password_hash", hash_password(password))
                .eq("is_active", True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("authenticate_sub_agent_failed", login_email=login_email, error=str(e))
            return None

        if not result.data:
            logger.warning("sub_agent_login_rejected", login_email=login_email)
            return None

        return SubAgentResponse(**result.data[0])


# Singleton instance for convenience
_sub_agent_service: Optional[SubAgentService] = None

def get_sub_agent_service() -> SubAgentService:
    """Get or create SubAgentService instance."""
    global _sub_agent_service
    if _sub_agent_service is None:
        _sub_agent_service = SubAgentService()
    return _sub_agent_service
