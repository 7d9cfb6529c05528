"""
Customer service for business logic operations.

Customers belong to one agent (user_id). Deletion is soft: is_active=False.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerType,
)
from exceptions import (
    CustomerNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


def _on_year(event_date: date, year: int) -> date:
    """A Feb 29 event falls on Mar 1 in non-leap years."""
    try:
        return event_date.replace(year=year)
    except ValueError:
        return date(year, 3, 1)


def next_occurrence(event_date: date, today: date) -> date:
    """
    The event's next anniversary on or after today.

    This year's date while it is still ahead, otherwise next year's.
    """
    occurrence = _on_year(event_date, today.year)
    if occurrence < today:
        occurrence = _on_year(event_date, today.year + 1)
    return occurrence


def is_upcoming(event_date: Optional[date], today: date, days: int) -> bool:
    """True if the next occurrence lies within [today, today + days]."""
    if event_date is None:
        return False
    return next_occurrence(event_date, today) <= today + timedelta(days=days)


def _serialize(data: dict) -> dict:
    """Dates to ISO strings, enums to values, for the Supabase payload."""
    payload = {}
    for key, value in data.items():
        if isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        payload[key] = value
    return payload


class CustomerService:
    """
    Customer business logic.

    Handles CRUD operations plus birthday/anniversary lookups.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "customers"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self, user_id: str) -> list[CustomerResponse]:
        """
        Get all active customers for an agent, ordered by name.

        Args:
            user_id: Owning agent

        Returns:
            List of customers
        """
        logger.info("getting_customers", user_id=user_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .eq("is_active", True)
                .order("customer_name")
                .execute()
            )

            customers = [CustomerResponse(**row) for row in result.data]

            logger.info("customers_retrieved", count=len(customers))

            return customers

        except Exception as e:
            logger.error("get_customers_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, customer_id: str) -> CustomerResponse:
        """
        Get a single customer by ID.

        Raises:
            CustomerNotFoundError: If customer doesn't exist
        """
        logger.debug("getting_customer", customer_id=customer_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", customer_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_customer_failed", customer_id=customer_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise CustomerNotFoundError(customer_id)

        return CustomerResponse(**result.data[0])

    def get_upcoming_birthdays(
        self,
        user_id: str,
        today: Optional[date] = None,
        days: Optional[int] = None
    ) -> list[CustomerResponse]:
        """Customers whose birthday falls within the next `days` days."""
        return self._get_upcoming(user_id, "date_of_birth", today, days)

    def get_upcoming_anniversaries(
        self,
        user_id: str,
        today: Optional[date] = None,
        days: Optional[int] = None
    ) -> list[CustomerResponse]:
        """Customers whose anniversary falls within the next `days` days."""
        return self._get_upcoming(user_id, "anniversary_date", today, days)

    def _get_upcoming(
        self,
        user_id: str,
        date_column: str,
        today: Optional[date],
        days: Optional[int]
    ) -> list[CustomerResponse]:
        today = today or date.today()
        days = days or settings.upcoming_events_days

        logger.info(
            "getting_upcoming_events",
            user_id=user_id,
            column=date_column,
            days=days
        )

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("user_id", user_id)
                .eq("is_active", True)
                .not_.is_(date_column, "null")
                .order(date_column)
                .execute()
            )
        except Exception as e:
            logger.error("get_upcoming_events_failed", column=date_column, error=str(e))
            raise DatabaseError("select", str(e))

        customers = [CustomerResponse(**row) for row in result.data]

        # Year-agnostic comparison can't be expressed as a PostgREST filter
        upcoming = [
            customer for customer in customers
            if is_upcoming(getattr(customer, date_column), today, days)
        ]
        upcoming.sort(key=lambda c: next_occurrence(getattr(c, date_column), today))

        return upcoming

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, user_id: str, data: CustomerCreate) -> CustomerResponse:
        """
        Create a new customer.

        Args:
            user_id: Owning agent
            data: Customer creation data

        Returns:
            Created CustomerResponse
        """
        logger.info("creating_customer", user_id=user_id)

        insert_data = _serialize(data.model_dump())
        insert_data["user_id"] = user_id
        insert_data["is_active"] = True

        try:
            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )

            customer = CustomerResponse(**result.data[0])

            logger.info("customer_created", customer_id=customer.id)

            return customer

        except Exception as e:
            logger.error("create_customer_failed", user_id=user_id, error=str(e))
            raise DatabaseError("insert", str(e))

    def update(self, customer_id: str, data: CustomerUpdate) -> CustomerResponse:
        """
        Update an existing customer. Only provided fields are written.

        Raises:
            CustomerNotFoundError: If customer doesn't exist
        """
        logger.info("updating_customer", customer_id=customer_id)

        existing = self.get_by_id(customer_id)

        update_data = _serialize(data.model_dump(exclude_unset=True))
        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", customer_id)
                .execute()
            )

            customer = CustomerResponse(**result.data[0])

            logger.info(
                "customer_updated",
                customer_id=customer_id,
                fields=list(update_data.keys())
            )

            return customer

        except Exception as e:
            logger.error("update_customer_failed", customer_id=customer_id, error=str(e))
            raise DatabaseError("update", str(e))

    def delete(self, customer_id: str) -> bool:
        """
        Soft delete a customer (set is_active=False).

        Raises:
            CustomerNotFoundError: If customer doesn't exist
        """
        logger.info("deleting_customer", customer_id=customer_id)

        self.get_by_id(customer_id)

        try:
            self.db.table(self.table).update(
                {"is_active": False}
            ).eq("id", customer_id).execute()

            logger.info("customer_deleted", customer_id=customer_id)

            return True

        except Exception as e:
            logger.error("delete_customer_failed", customer_id=customer_id, error=str(e))
            raise DatabaseError("update", str(e))

    def find_or_create_from_policy(
        self,
        user_id: str,
        policyholder_name: str,
        contact_no: Optional[str] = None,
        email_id: Optional[str] = None
    ) -> Optional[str]:
        """
        Link a policy to a customer record.

        Reuses the agent's active customer with the same contact number,
        otherwise creates an Individual customer from the policyholder.

        Returns:
            Customer ID, or None if the lookup/insert failed (the policy
            is still saved without a customer link)
        """
        try:
            if contact_no:
                existing = (
                    self.db.table(self.table)
                    .select("id")
                    .eq("user_id", user_id)
                    .eq("contact_no", contact_no)
                    .eq("is_active", True)
                    .limit(1)
                    .execute()
                )
                if existing.data:
                    return existing.data[0]["id"]

            result = (
                self.db.table(self.table)
                .insert({
                    "user_id": user_id,
                    "customer_name": policyholder_name,
                    "contact_no": contact_no,
                    "email_id": email_id,
                    "customer_type": CustomerType.INDIVIDUAL.value,
                    "is_active": True,
                })
                .execute()
            )

            customer_id = result.data[0]["id"]
            logger.info("customer_created_from_policy", customer_id=customer_id)
            return customer_id

        except Exception as e:
            logger.warning(
                "find_or_create_customer_failed",
                user_id=user_id,
                error=str(e)
            )
            return None


# Singleton instance for convenience
_customer_service: Optional[CustomerService] = None

def get_customer_service() -> CustomerService:
    """Get or create CustomerService instance."""
    global _customer_service
    if _customer_service is None:
        _customer_service = CustomerService()
    return _customer_service
