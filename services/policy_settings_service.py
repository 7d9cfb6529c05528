"""
Policy settings service.

Each agent keeps their own dropdown values for the policy form. Values
are soft-deleted (is_active=False) by default so existing policies that
reference them keep displaying; permanent deletion is a separate call.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.policy_setting import (
    SettingCategory,
    PolicySettingCreate,
    PolicySettingResponse,
    GroupedPolicySettings,
)
from exceptions import (
    PolicySettingNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


DEFAULT_SETTINGS: dict[SettingCategory, list[str]] = {
    SettingCategory.INSURANCE_COMPANY: [
        "Life Insurance Corporation of India",
        "HDFC Life Insurance Company Limited",
        "ICICI Prudential Life Insurance Co. Ltd.",
        "SBI Life Insurance Co. Ltd.",
        "HDFC ERGO General Insurance Co. Ltd.",
        "ICICI Lombard General Insurance Co. Ltd.",
        "Bajaj Allianz Life Insurance Co. Ltd.",
        "Tata AIA Life Insurance Co. Ltd.",
    ],
    SettingCategory.PRODUCT_TYPE: [
        "Term Insurance",
        "Health Insurance",
        "Motor Insurance",
        "Home Insurance",
        "Travel Insurance",
    ],
    SettingCategory.LOB: [
        "Life Insurance",
        "Health Insurance",
        "Motor Insurance",
        "Fire Insurance",
        "Marine Insurance",
    ],
}


class PolicySettingsService:
    """Per-agent insurance company / product type / LOB lists."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "policy_settings"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_by_category(
        self,
        user_id: str,
        category: SettingCategory
    ) -> list[PolicySettingResponse]:
        """Active values of one category, alphabetical."""
        logger.info("getting_policy_settings", user_id=user_id, category=category.value)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .eq("category", category.value)
                .eq("is_active", True)
                .order("value")
                .execute()
            )

            return [PolicySettingResponse(**row) for row in result.data]

        except Exception as e:
            logger.error("get_policy_settings_failed", category=category.value, error=str(e))
            raise DatabaseError("select", str(e))

    def get_grouped(self, user_id: str) -> GroupedPolicySettings:
        """All active values grouped by category."""
        logger.info("getting_grouped_policy_settings", user_id=user_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .eq("is_active", True)
                .order("category")
                .order("value")
                .execute()
            )
        except Exception as e:
            logger.error("get_grouped_policy_settings_failed", error=str(e))
            raise DatabaseError("select", str(e))

        grouped = GroupedPolicySettings()
        for row in result.data:
            setting = PolicySettingResponse(**row)
            getattr(grouped, setting.category.value).append(setting)

        return grouped

    def _get_owned(self, setting_id: str, user_id: str) -> PolicySettingResponse:
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", setting_id)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_policy_setting_failed", setting_id=setting_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise PolicySettingNotFoundError(setting_id)

        return PolicySettingResponse(**result.data[0])

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, user_id: str, data: PolicySettingCreate) -> PolicySettingResponse:
        """Add a dropdown value."""
        logger.info("creating_policy_setting", user_id=user_id, category=data.category.value)

        try:
            result = (
                self.db.table(self.table)
                .insert({
                    "user_id": user_id,
                    "category": data.category.value,
                    "value": data.value.strip(),
                    "is_active": True,
                })
                .execute()
            )

            setting = PolicySettingResponse(**result.data[0])

            logger.info("policy_setting_created", setting_id=setting.id)

            return setting

        except Exception as e:
            logger.error("create_policy_setting_failed", user_id=user_id, error=str(e))
            raise DatabaseError("insert", str(e))

    def update(self, setting_id: str, user_id: str, value: str) -> PolicySettingResponse:
        """
        Rename a dropdown value.

        Raises:
            PolicySettingNotFoundError: Not found or owned by another agent
        """
        logger.info("updating_policy_setting", setting_id=setting_id)

        self._get_owned(setting_id, user_id)

        try:
            result = (
                self.db.table(self.table)
                .update({"value": value.strip()})
                .eq("id", setting_id)
                .eq("user_id", user_id)
                .execute()
            )

            return PolicySettingResponse(**result.data[0])

        except Exception as e:
            logger.error("update_policy_setting_failed", setting_id=setting_id, error=str(e))
            raise DatabaseError("update", str(e))

    def deactivate(self, setting_id: str, user_id: str) -> bool:
        """Hide a value from the dropdown (soft delete)."""
        logger.info("deactivating_policy_setting", setting_id=setting_id)

        self._get_owned(setting_id, user_id)

        try:
            self.db.table(self.table).update(
                {"is_active": False}
            ).eq("id", setting_id).eq("user_id", user_id).execute()
            return True

        except Exception as e:
            logger.error("deactivate_policy_setting_failed", setting_id=setting_id, error=str(e))
            raise DatabaseError("update", str(e))

    def delete(self, setting_id: str, user_id: str) -> bool:
        """Remove a value permanently."""
        logger.info("deleting_policy_setting", setting_id=setting_id)

        self._get_owned(setting_id, user_id)

        try:
            self.db.table(self.table).delete().eq("id", setting_id).eq("user_id", user_id).execute()
            return True

        except Exception as e:
            logger.error("delete_policy_setting_failed", setting_id=setting_id, error=str(e))
            raise DatabaseError("delete", str(e))

    def initialize_defaults(self, user_id: str) -> int:
        """
        Seed the default lists for a new agent.

        Does nothing if the agent already has any setting, active or not.

        Returns:
            Number of values inserted
        """
        try:
            existing = (
                self.db.table(self.table)
                .select("id")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
            if existing.data:
                logger.debug("policy_settings_already_initialized", user_id=user_id)
                return 0

            rows = [
                {
                    "user_id": user_id,
                    "category": category.value,
                    "value": value,
                    "is_active": True,
                }
                for category, values in DEFAULT_SETTINGS.items()
                for value in values
            ]
            self.db.table(self.table).insert(rows).execute()

        except Exception as e:
            logger.error("initialize_policy_settings_failed", user_id=user_id, error=str(e))
            raise DatabaseError("insert", str(e))

        logger.info("policy_settings_initialized", user_id=user_id, count=len(rows))

        return len(rows)


# Singleton instance for convenience
_policy_settings_service: Optional[PolicySettingsService] = None

def get_policy_settings_service() -> PolicySettingsService:
    """Get or create PolicySettingsService instance."""
    global _policy_settings_service
    if _policy_settings_service is None:
        _policy_settings_service = PolicySettingsService()
    return _policy_settings_service
