"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are validated at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from contextlib import ExitStack
from datetime import datetime, timezone
from typing import Generator


SERVICE_MODULES = [
    "services.customer_service",
    "services.sub_agent_service",
    "services.policy_service",
    "services.policy_settings_service",
    "services.ai_upload_service",
    "services.feature_request_service",
    "services.admin_service",
]

SINGLETONS = {
    "services.customer_service": "_customer_service",
    "services.sub_agent_service": "_sub_agent_service",
    "services.policy_service": "_policy_service",
    "services.policy_settings_service": "_policy_settings_service",
    "services.ai_upload_service": "_ai_upload_service",
    "services.feature_request_service": "_feature_request_service",
    "services.admin_service": "_admin_service",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        if count is not None:
            self.count = count
        elif isinstance(self.data, list):
            self.count = len(self.data)
        else:
            self.count = 1


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters are accepted and ignored: tests configure exactly the rows
    a query should see.
    """

    def __init__(self, client: "MockSupabaseClient", table: str, data: list = None, count: int = None):
        self._client = client
        self._table = table
        self._data = data or []
        self._count = count
        self._is_single = False
        self._operation = "select"

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        self._operation = "insert"
        rows = [data] if isinstance(data, dict) else data
        self._client.inserted.setdefault(self._table, []).extend(rows)
        for item in rows:
            item.setdefault("id", "test-uuid-123")
            item.setdefault("created_at", _now())
            item.setdefault("updated_at", _now())
        self._data = rows
        return self

    def update(self, data):
        # Simulate update - merge with existing data
        self._operation = "update"
        self._client.updated.setdefault(self._table, []).append(data)
        merged = [{**item, **data, "updated_at": _now()} for item in self._data]
        self._data = merged
        return self

    def delete(self):
        self._operation = "delete"
        self._client.deleted.append(self._table)
        return self

    @property
    def not_(self):
        return self

    def eq(self, column, value):
        return self

    def neq(self, column, value):
        return self

    def is_(self, column, value):
        return self

    def in_(self, column, values):
        return self

    def ilike(self, column, pattern):
        return self

    def or_(self, filters):
        return self

    def gte(self, column, value):
        return self

    def lte(self, column, value):
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        failure = self._client.failures.get((self._table, self._operation))
        if failure:
            raise Exception(failure)

        if self._is_single:
            # Return first item or empty for single()
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(
                data=data,
                count=1 if data else 0
            )
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, client: "MockSupabaseClient", name: str, data: list = None, count: int = None):
        self._client = client
        self._name = name
        self._data = data or []
        self._count = count

    def _query(self) -> MockSupabaseQuery:
        rows = [dict(row) for row in self._data]
        return MockSupabaseQuery(self._client, self._name, rows, self._count)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)

    def update(self, data):
        return self._query().update(data)

    def delete(self):
        return self._query().delete()


class MockRpcCall:
    def __init__(self, client: "MockSupabaseClient", name: str):
        self._client = client
        self._name = name

    def execute(self) -> MockSupabaseResponse:
        failure = self._client.failures.get((self._name, "rpc"))
        if failure:
            raise Exception(failure)
        return MockSupabaseResponse(data=list(self._client._rpc.get(self._name, [])))


class MockSupabaseClient:
    """
    Mock Supabase client.

    Records every insert, update, delete and RPC call so tests can
    assert on what would have been written.
    """

    def __init__(self):
        self._tables = {}
        self._rpc = {}
        self.failures = {}
        self.inserted: dict[str, list] = {}
        self.updated: dict[str, list] = {}
        self.deleted: list[str] = []
        self.rpc_calls: list[tuple] = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def set_rpc_data(self, function_name: str, data: list):
        """Configure rows returned by a database function."""
        self._rpc[function_name] = data

    def fail(self, name: str, operation: str, message: str = "connection reset"):
        """Make every `operation` on a table (or 'rpc' on a function) raise."""
        self.failures[(name, operation)] = message

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(self, name, config["data"], config["count"])

    def rpc(self, name: str, params: dict = None) -> MockRpcCall:
        self.rpc_calls.append((name, params or {}))
        return MockRpcCall(self, name)


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def reset_service_singletons():
    """Each test builds services against its own mock client."""
    import importlib

    modules = {name: importlib.import_module(name) for name in SINGLETONS}
    for name, attr in SINGLETONS.items():
        setattr(modules[name], attr, None)
    yield
    for name, attr in SINGLETONS.items():
        setattr(modules[name], attr, None)


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("policies", [
                {"id": "1", "policy_number": "POL-1", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("policies", [...])
            # Now any service using get_supabase_client() gets the mock
    """
    with ExitStack() as stack:
        stack.enter_context(
            patch("config.database.get_supabase_client", return_value=mock_supabase)
        )
        for module in SERVICE_MODULES:
            stack.enter_context(
                patch(f"{module}.get_supabase_client", return_value=mock_supabase)
            )
        stack.enter_context(
            patch("services.admin_service.get_admin_client", return_value=None)
        )
        yield mock_supabase


@pytest.fixture
def sample_policy_row() -> dict:
    """Policy row as stored."""
    return {
        "id": "policy-uuid-1",
        "user_id": "agent-1",
        "customer_id": "customer-uuid-1",
        "policyholder_name": "John Doe",
        "contact_no": "9876543210",
        "email_id": "john@example.com",
        "policy_type": "General",
        "policy_number": "POL123456",
        "insurance_company": "ICICI Lombard",
        "product_type": "Two Wheeler",
        "policy_start_date": "2024-01-01",
        "policy_end_date": "2024-12-31",
        "business_type": "New",
        "status": "active",
        "premium_amount": 5000,
        "total_premium": "5000",
        "net_premium": "4500",
        "sub_agent_id": None,
        "created_by_name": "Asha",
        "created_at": "2024-01-02T10:00:00Z",
        "updated_at": "2024-01-02T10:00:00Z"
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("policies", [...])
            response = test_client_with_mock_db.get("/api/policies?user_id=agent-1")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
