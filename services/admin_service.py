"""
Admin service: portal users, subscriptions, and the broadcast banner.

Writes to the users table need the service-role client when row-level
security is on; without SUPABASE_SERVICE_KEY the anon client is used.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import structlog

from config import get_supabase_client, get_admin_client, settings
from models.admin import (
    AppUserResponse,
    AdminStats,
    PlanSummary,
    SubscriptionStatus,
    UserRole,
    AdminNotificationResponse,
)
from services.ai_upload_service import PLAN_LIMITS
from services.policy_service import get_policy_service
from exceptions import (
    UserNotFoundError,
    InvalidSubscriptionError,
    ValidationError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Timestamps come back as ISO strings; naive ones are taken as UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def status_after_unlock(
    trial_end: Optional[datetime],
    subscription_end: Optional[datetime],
    now: Optional[datetime] = None
) -> SubscriptionStatus:
    """Trial if still in trial, else active if subscription not ended, else expired."""
    now = now or _utcnow()
    if trial_end and now <= trial_end:
        return SubscriptionStatus.TRIAL
    if subscription_end and now <= subscription_end:
        return SubscriptionStatus.ACTIVE
    return SubscriptionStatus.EXPIRED


def summarize_users(users: list[AppUserResponse]) -> AdminStats:
    """Status counts over non-admin users and income from active plans."""
    agents = [u for u in users if u.role != UserRole.ADMIN]

    plans: dict[str, PlanSummary] = {}
    for user in agents:
        if user.subscription_status != SubscriptionStatus.ACTIVE:
            continue
        key = str(user.subscription_plan) if user.subscription_plan is not None else "unknown"
        summary = plans.setdefault(key, PlanSummary(plan=key, count=0, income=0))
        summary.count += 1
        summary.income += user.subscription_plan or 0

    def count(status: SubscriptionStatus) -> int:
        return sum(1 for u in agents if u.subscription_status == status)

    return AdminStats(
        total=len(agents),
        trial=count(SubscriptionStatus.TRIAL),
        active=count(SubscriptionStatus.ACTIVE),
        expired=count(SubscriptionStatus.EXPIRED),
        locked=count(SubscriptionStatus.LOCKED),
        plans=list(plans.values()),
        total_monthly_income=sum(p.income for p in plans.values()),
    )


class AdminService:
    """
    Admin panel operations.

    Usage:
        service = get_admin_service()
        users = service.list_users(search="ravi", status=SubscriptionStatus.TRIAL)
    """

    def __init__(self):
        self.db = get_admin_client() or get_supabase_client()
        self.table = "users"
        self.notifications_table = "admin_notifications"

    # ===================
    # USERS
    # ===================

    def _fetch_users(self) -> list[AppUserResponse]:
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_users_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [AppUserResponse(**row) for row in result.data]

    def get_user(self, user_id: str) -> AppUserResponse:
        """
        Raises:
            UserNotFoundError: If no user has this ID
        """
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_user_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise UserNotFoundError(user_id)

        return AppUserResponse(**result.data[0])

    def list_users(
        self,
        search: Optional[str] = None,
        status: Optional[SubscriptionStatus] = None
    ) -> list[AppUserResponse]:
        """
        Agents (admins excluded), newest first, with their policy counts.

        Args:
            search: Case-insensitive match on display name or email
            status: Subscription status filter
        """
        logger.info("listing_users", search=search, status=status)

        users = [u for u in self._fetch_users() if u.role != UserRole.ADMIN]

        if search:
            term = search.strip().lower()
            users = [
                u for u in users
                if term in u.display_name.lower() or term in u.email.lower()
            ]
        if status:
            users = [u for u in users if u.subscription_status == status]

        counts = get_policy_service().count_by_user()
        for user in users:
            user.policy_count = counts.get(user.id, 0)

        return users

    def get_stats(self) -> AdminStats:
        return summarize_users(self._fetch_users())

    def _update_user(self, user_id: str, changes: dict, event: str) -> AppUserResponse:
        self.get_user(user_id)

        try:
            result = (
                self.db.table(self.table)
                .update(changes)
                .eq("id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"{event}_failed", user_id=user_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info(event, user_id=user_id, fields=list(changes.keys()))

        if result.data:
            return AppUserResponse(**result.data[0])
        return self.get_user(user_id)

    def lock_user(self, user_id: str, reason: str, admin_id: str) -> AppUserResponse:
        """
        Lock an account. A reason is required.

        Raises:
            ValidationError: Blank reason
            UserNotFoundError: Unknown user
        """
        if not reason or not reason.strip():
            raise ValidationError(
                code="LOCK_REASON_REQUIRED",
                message="Please provide a reason for locking"
            )

        return self._update_user(user_id, {
            "is_locked": True,
            "locked_reason": reason.strip(),
            "locked_by": admin_id,
            "locked_at": _utcnow().isoformat(),
            "subscription_status": SubscriptionStatus.LOCKED.value,
        }, "user_locked")

    def unlock_user(self, user_id: str) -> AppUserResponse:
        """Unlock an account; status is recomputed from its trial and subscription end dates."""
        user = self.get_user(user_id)

        new_status = status_after_unlock(
            parse_timestamp(user.trial_end_date),
            parse_timestamp(user.subscription_end_date)
        )

        return self._update_user(user_id, {
            "is_locked": False,
            "locked_reason": None,
            "locked_by": None,
            "locked_at": None,
            "subscription_status": new_status.value,
        }, "user_unlocked")

    def activate_subscription(self, user_id: str, days: Optional[int] = None) -> AppUserResponse:
        """Start a subscription today that runs for `days` (default from settings)."""
        days = days or settings.default_subscription_days
        if days < 1:
            raise InvalidSubscriptionError("Invalid subscription duration", {"days": days})

        start = _utcnow()
        return self._update_user(user_id, {
            "subscription_status": SubscriptionStatus.ACTIVE.value,
            "subscription_start_date": start.isoformat(),
            "subscription_end_date": (start + timedelta(days=days)).isoformat(),
            "is_locked": False,
        }, "subscription_activated")

    def extend_subscription(self, user_id: str, days: int) -> AppUserResponse:
        """Add `days` to the current end date, or to now if there is none."""
        if days < 1:
            raise InvalidSubscriptionError("Invalid extension duration", {"days": days})

        user = self.get_user(user_id)
        base = parse_timestamp(user.subscription_end_date) or _utcnow()

        return self._update_user(user_id, {
            "subscription_end_date": (base + timedelta(days=days)).isoformat(),
            "subscription_status": SubscriptionStatus.ACTIVE.value,
        }, "subscription_extended")

    def change_plan(self, user_id: str, plan: int) -> AppUserResponse:
        """
        Raises:
            InvalidSubscriptionError: Plan is not one of the offered prices
        """
        if plan not in PLAN_LIMITS:
            raise InvalidSubscriptionError(
                f"Unknown plan: {plan}",
                {"plans": sorted(PLAN_LIMITS)}
            )

        return self._update_user(user_id, {"subscription_plan": plan}, "plan_changed")

    # ===================
    # BROADCAST NOTIFICATION
    # ===================

    def get_active_notification(self) -> Optional[AdminNotificationResponse]:
        """Newest active banner, or None."""
        try:
            result = (
                self.db.table(self.notifications_table)
                .select("*")
                .eq("is_active", True)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_notification_failed", error=str(e))
            return None

        if not result.data:
            return None

        return AdminNotificationResponse(**result.data[0])

    def set_notification(self, admin_id: str, message: str) -> AdminNotificationResponse:
        """Replace this admin's active banner with a new one."""
        self.clear_notification(admin_id)

        try:
            result = (
                self.db.table(self.notifications_table)
                .insert({
                    "user_id": admin_id,
                    "message": message.strip(),
                    "is_active": True,
                })
                .execute()
            )
        except Exception as e:
            logger.error("set_notification_failed", admin_id=admin_id, error=str(e))
            raise DatabaseError("insert", str(e))

        logger.info("notification_set", admin_id=admin_id)

        return AdminNotificationResponse(**result.data[0])

    def clear_notification(self, admin_id: str) -> None:
        """Deactivate this admin's active banner, if any."""
        try:
            (
                self.db.table(self.notifications_table)
                .update({"is_active": False, "updated_at": _utcnow().isoformat()})
                .eq("user_id", admin_id)
                .eq("is_active", True)
                .execute()
            )
        except Exception as e:
            logger.error("clear_notification_failed", admin_id=admin_id, error=str(e))
            raise DatabaseError("update", str(e))


# Singleton instance for convenience
_admin_service: Optional[AdminService] = None

def get_admin_service() -> AdminService:
    """Get or create AdminService instance."""
    global _admin_service
    if _admin_service is None:
        _admin_service = AdminService()
    return _admin_service
