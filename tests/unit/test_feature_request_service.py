"""
Unit tests for FeatureRequestService.

Run: pytest tests/unit/test_feature_request_service.py -v
"""

import pytest

from services.feature_request_service import FeatureRequestService
from models.feature_request import (
    FeatureRequestCreate,
    FeatureRequestUpdate,
    FeatureRequestStatus,
    FeatureRequestPriority,
)
from exceptions import FeatureRequestNotFoundError, UserNotFoundError


def request_row(**overrides) -> dict:
    row = {
        "id": "fr-1",
        "user_id": "user-1",
        "user_name": "Asha",
        "user_email": "asha@example.com",
        "title": "Export to Excel",
        "description": "Download the policy list",
        "status": "pending",
        "priority": "medium",
        "admin_notes": None,
        "created_at": "2024-03-01T09:00:00Z",
    }
    row.update(overrides)
    return row


class TestFeatureRequestCreate:

    def test_copies_requester_profile(self, mock_db, mock_supabase):
        # Arrange
        mock_supabase.set_table_data("users", [
            {"display_name": "Asha", "email": "asha@example.com"}
        ])
        service = FeatureRequestService()

        # Act
        request = service.create("user-1", FeatureRequestCreate(
            title="Export to Excel",
            description="Download the policy list"
        ))

        # Assert
        assert request.user_name == "Asha"
        assert request.user_email == "asha@example.com"
        assert request.status == FeatureRequestStatus.PENDING
        assert request.priority == FeatureRequestPriority.MEDIUM

    def test_unknown_user(self, mock_db, mock_supabase):
        service = FeatureRequestService()

        with pytest.raises(UserNotFoundError) as exc_info:
            service.create("ghost", FeatureRequestCreate(title="x", description="y"))

        assert exc_info.value.status_code == 404
        assert "feature_requests" not in mock_supabase.inserted


class TestFeatureRequestReadUpdate:

    def test_get_for_user(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("feature_requests", [request_row()])
        service = FeatureRequestService()

        assert [r.title for r in service.get_for_user("user-1")] == ["Export to Excel"]

    def test_get_all(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("feature_requests", [request_row(), request_row(id="fr-2")])
        service = FeatureRequestService()

        assert len(service.get_all()) == 2

    def test_update_triage(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("feature_requests", [request_row()])
        service = FeatureRequestService()

        request = service.update("fr-1", FeatureRequestUpdate(
            status=FeatureRequestStatus.PLANNED,
            admin_notes="Next release"
        ))

        assert request.status == FeatureRequestStatus.PLANNED
        assert mock_supabase.updated["feature_requests"] == [
            {"status": "planned", "admin_notes": "Next release"}
        ]

    def test_update_not_found(self, mock_db, mock_supabase):
        service = FeatureRequestService()

        with pytest.raises(FeatureRequestNotFoundError):
            service.update("missing", FeatureRequestUpdate(priority=FeatureRequestPriority.HIGH))

    def test_delete(self, mock_db, mock_supabase):
        service = FeatureRequestService()

        assert service.delete("fr-1") is True
        assert mock_supabase.deleted == ["feature_requests"]
