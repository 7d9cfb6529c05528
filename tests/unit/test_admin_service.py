"""
Unit tests for AdminService and its helpers.

Run: pytest tests/unit/test_admin_service.py -v
"""

from datetime import datetime, timedelta, timezone
import pytest

from services.admin_service import (
    AdminService,
    parse_timestamp,
    status_after_unlock,
    summarize_users,
)
from models.admin import AppUserResponse, SubscriptionStatus
from exceptions import (
    UserNotFoundError,
    InvalidSubscriptionError,
    ValidationError,
    DatabaseError,
)

from tests.factories import UserFactory


NOW = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


class TestHelpers:

    def test_parse_timestamp(self):
        assert parse_timestamp("2024-06-10T12:00:00Z") == NOW
        assert parse_timestamp("2024-06-10T12:00:00") == NOW
        assert parse_timestamp(NOW) == NOW
        assert parse_timestamp("") is None
        assert parse_timestamp("not a date") is None

    @pytest.mark.parametrize("trial_end,subscription_end,expected", [
        (NOW + timedelta(days=1), None, SubscriptionStatus.TRIAL),
        (NOW - timedelta(days=1), NOW + timedelta(days=5), SubscriptionStatus.ACTIVE),
        (NOW - timedelta(days=1), NOW - timedelta(days=1), SubscriptionStatus.EXPIRED),
        (None, None, SubscriptionStatus.EXPIRED),
    ])
    def test_status_after_unlock(self, trial_end, subscription_end, expected):
        assert status_after_unlock(trial_end, subscription_end, now=NOW) == expected

    def test_summarize_users(self):
        """Admins are left out; income only counts active plans."""
        # Arrange
        users = [AppUserResponse(**row) for row in [
            UserFactory.create(role="admin", subscription_status="active", subscription_plan=2499),
            UserFactory.create(subscription_status="active", subscription_plan=499),
            UserFactory.create(subscription_status="active", subscription_plan=499),
            UserFactory.create(subscription_status="active", subscription_plan=None),
            UserFactory.create(subscription_status="trial", subscription_plan=799),
            UserFactory.create(subscription_status="expired"),
            UserFactory.create(subscription_status="locked"),
        ]]

        # Act
        stats = summarize_users(users)

        # Assert
        assert stats.total == 6
        assert (stats.trial, stats.active, stats.expired, stats.locked) == (1, 3, 1, 1)
        plans = {p.plan: (p.count, p.income) for p in stats.plans}
        assert plans == {"499": (2, 998), "unknown": (1, 0)}
        assert stats.total_monthly_income == 998


class TestListUsers:

    def test_excludes_admins_and_adds_policy_counts(self, mock_db, mock_supabase):
        # Arrange
        mock_supabase.set_table_data("users", [
            UserFactory.create(id="admin-1", role="admin"),
            UserFactory.create(id="u-1", display_name="Ravi Kumar"),
            UserFactory.create(id="u-2", display_name="Meera", email="meera@example.com"),
        ])
        mock_supabase.set_table_data("policies", [
            {"user_id": "u-1"}, {"user_id": "u-1"}, {"user_id": "admin-1"},
        ])
        service = AdminService()

        # Act
        users = service.list_users()

        # Assert
        assert [(u.id, u.policy_count) for u in users] == [("u-1", 2), ("u-2", 0)]

    def test_search_matches_name_or_email(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [
            UserFactory.create(id="u-1", display_name="Ravi Kumar", email="rk@example.com"),
            UserFactory.create(id="u-2", display_name="Meera", email="RAVI.m@example.com"),
            UserFactory.create(id="u-3", display_name="Asha", email="asha@example.com"),
        ])
        service = AdminService()

        users = service.list_users(search="  ravi ")

        assert [u.id for u in users] == ["u-1", "u-2"]

    def test_status_filter(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [
            UserFactory.create(id="u-1", subscription_status="trial"),
            UserFactory.create(id="u-2", subscription_status="expired"),
        ])
        service = AdminService()

        users = service.list_users(status=SubscriptionStatus.EXPIRED)

        assert [u.id for u in users] == ["u-2"]

    def test_get_stats(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [
            UserFactory.create(subscription_status="active", subscription_plan=799),
        ])
        service = AdminService()

        stats = service.get_stats()

        assert stats.total_monthly_income == 799


class TestLocking:

    def test_lock_requires_reason(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(id="u-1")])
        service = AdminService()

        with pytest.raises(ValidationError) as exc_info:
            service.lock_user("u-1", "   ", "admin-1")

        assert exc_info.value.code == "LOCK_REASON_REQUIRED"
        assert "users" not in mock_supabase.updated

    def test_lock_user(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(id="u-1")])
        service = AdminService()

        user = service.lock_user("u-1", " Payment pending ", "admin-1")

        changes = mock_supabase.updated["users"][0]
        assert changes["is_locked"] is True
        assert changes["locked_reason"] == "Payment pending"
        assert changes["locked_by"] == "admin-1"
        assert user.subscription_status == SubscriptionStatus.LOCKED

    def test_lock_unknown_user(self, mock_db, mock_supabase):
        service = AdminService()

        with pytest.raises(UserNotFoundError):
            service.lock_user("ghost", "Fraud", "admin-1")

    def test_unlock_during_trial(self, mock_db, mock_supabase):
        trial_end = (datetime.now(timezone.utc) + timedelta(days=3)).isoformat()
        mock_supabase.set_table_data("users", [UserFactory.create(
            id="u-1",
            is_locked=True,
            subscription_status="locked",
            trial_end_date=trial_end
        )])
        service = AdminService()

        user = service.unlock_user("u-1")

        changes = mock_supabase.updated["users"][0]
        assert changes["is_locked"] is False
        assert changes["locked_reason"] is None
        assert user.subscription_status == SubscriptionStatus.TRIAL

    def test_unlock_with_nothing_current_is_expired(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(
            id="u-1",
            is_locked=True,
            subscription_status="locked",
            trial_end_date="2020-01-01T00:00:00Z",
            subscription_end_date="2020-02-01T00:00:00Z"
        )])
        service = AdminService()

        assert service.unlock_user("u-1").subscription_status == SubscriptionStatus.EXPIRED


class TestSubscriptions:

    def test_activate_default_duration(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(id="u-1", is_locked=True)])
        service = AdminService()

        user = service.activate_subscription("u-1")

        start = parse_timestamp(user.subscription_start_date)
        end = parse_timestamp(user.subscription_end_date)
        assert end - start == timedelta(days=30)
        assert user.subscription_status == SubscriptionStatus.ACTIVE
        assert user.is_locked is False

    def test_activate_invalid_duration(self, mock_db, mock_supabase):
        service = AdminService()

        with pytest.raises(InvalidSubscriptionError):
            service.activate_subscription("u-1", days=-5)

    def test_extend_from_current_end(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(
            id="u-1",
            subscription_status="expired",
            subscription_end_date="2024-06-10T12:00:00+00:00"
        )])
        service = AdminService()

        user = service.extend_subscription("u-1", 15)

        assert parse_timestamp(user.subscription_end_date) == NOW + timedelta(days=15)
        assert user.subscription_status == SubscriptionStatus.ACTIVE

    def test_extend_without_end_date_starts_now(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(id="u-1")])
        service = AdminService()

        before = datetime.now(timezone.utc)
        user = service.extend_subscription("u-1", 10)

        assert parse_timestamp(user.subscription_end_date) >= before + timedelta(days=10)

    def test_change_plan(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(id="u-1", subscription_plan=199)])
        service = AdminService()

        user = service.change_plan("u-1", 1499)

        assert user.subscription_plan == 1499
        assert mock_supabase.updated["users"] == [{"subscription_plan": 1499}]

    def test_change_to_unknown_plan(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("users", [UserFactory.create(id="u-1")])
        service = AdminService()

        with pytest.raises(InvalidSubscriptionError) as exc_info:
            service.change_plan("u-1", 999)

        assert exc_info.value.status_code == 422


class TestNotifications:

    def test_get_active_notification(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("admin_notifications", [{
            "id": "n-1",
            "user_id": "admin-1",
            "message": "Maintenance on Sunday",
            "is_active": True,
            "created_at": "2024-06-01T00:00:00Z",
        }])
        service = AdminService()

        notification = service.get_active_notification()

        assert notification.message == "Maintenance on Sunday"

    def test_no_notification(self, mock_db, mock_supabase):
        service = AdminService()

        assert service.get_active_notification() is None

    def test_set_replaces_previous(self, mock_db, mock_supabase):
        service = AdminService()

        notification = service.set_notification("admin-1", "  New rates from July ")

        assert mock_supabase.updated["admin_notifications"][0]["is_active"] is False
        assert mock_supabase.inserted["admin_notifications"][0]["message"] == "New rates from July"
        assert notification.is_active is True

    def test_clear_failure_raises(self, mock_db, mock_supabase):
        mock_supabase.fail("admin_notifications", "update")
        service = AdminService()

        with pytest.raises(DatabaseError):
            service.clear_notification("admin-1")
