"""Tests for the push request review workflow."""

from unittest.mock import MagicMock, Mock, patch

import pytest
from sqlalchemy.exc import OperationalError

from src.services.push_request_service import (
    DEFAULT_REJECTION_REASON,
    STATUS_APPROVED,
    STATUS_REJECTED,
    CampaignNotFound,
    InvalidTransition,
    PushRequestNotFound,
    approve_push_request,
    create_push_request,
    edit_push_request,
    list_campaign_push_requests,
    reject_push_request,
)


def _request(status="pending"):
    request = Mock()
    request.status = status
    request.to_dict.side_effect = lambda: {"status": request.status, "edited_message": request.edited_message}
    return request


@pytest.fixture
def db():
    with patch("src.services.push_request_service.get_db_session") as mock_get_db_session:
        mock_session = MagicMock()
        mock_get_db_session.return_value.__enter__.return_value = mock_session
        yield mock_session


class TestRejectService:
    def test_reject_sets_status_reason_and_decision_time(self, db):
        db.execute.return_value.rowcount = 1

        assert reject_push_request("req-1", "Too long") == 1

        stmt = db.execute.call_args[0][0]
        values = stmt.compile().params
        assert values["status"] == STATUS_REJECTED
        assert values["rejection_reason"] == "Too long"
        assert values["approved_at"] is not None
        db.commit.assert_called_once()

    def test_reject_default_reason(self, db):
        db.execute.return_value.rowcount = 1

        reject_push_request("req-1", None)

        stmt = db.execute.call_args[0][0]
        values = stmt.compile().params
        assert values["rejection_reason"] == DEFAULT_REJECTION_REASON

    def test_reject_has_no_status_guard(self, db):
        db.execute.return_value.rowcount = 1

        reject_push_request("already-approved", "Changed our mind")

        stmt = db.execute.call_args[0][0]
        where = str(stmt.whereclause)
        assert "status" not in where

    def test_reject_unknown_id_updates_nothing(self, db):
        db.execute.return_value.rowcount = 0

        assert reject_push_request("missing") == 0


class TestApproveService:
    def test_approve_pending(self, db):
        request = _request()
        db.get.return_value = request

        data = approve_push_request("req-1")

        assert data["status"] == STATUS_APPROVED
        assert request.approved_at is not None
        db.commit.assert_called_once()

    def test_approve_missing(self, db):
        db.get.return_value = None

        with pytest.raises(PushRequestNotFound):
            approve_push_request("req-1")

    def test_approve_requires_pending(self, db):
        db.get.return_value = _request(status=STATUS_REJECTED)

        with pytest.raises(InvalidTransition, match="not pending"):
            approve_push_request("req-1")
        db.commit.assert_not_called()


class TestEditService:
    def test_edit_stores_trimmed_message(self, db):
        request = _request(status="scheduled")
        db.get.return_value = request

        data = edit_push_request("req-1", "  Happy hour at 5!  ")

        assert request.edited_message == "Happy hour at 5!"
        assert request.edited_at is not None
        assert data["edited_message"] == "Happy hour at 5!"

    def test_edit_decided_request_is_refused(self, db):
        db.get.return_value = _request(status=STATUS_APPROVED)

        with pytest.raises(InvalidTransition):
            edit_push_request("req-1", "New text")


class TestPosService:
    def test_create_uses_first_campaign(self, db):
        client = Mock()
        client.campaigns = [Mock(id="camp-1"), Mock(id="camp-2")]
        db.scalars.return_value.first.return_value = client

        data = create_push_request("cafe-central", " Free coffee today ")

        created = db.add.call_args[0][0]
        assert created.campaign_id == "camp-1"
        assert created.message == "Free coffee today"
        assert created.status == "pending"
        assert data["message"] == "Free coffee today"

    def test_create_without_campaign(self, db):
        client = Mock()
        client.campaigns = []
        db.scalars.return_value.first.return_value = client

        with pytest.raises(CampaignNotFound):
            create_push_request("cafe-central", "Hi")
        db.add.assert_not_called()

    def test_list_rejects_foreign_campaign(self, db):
        db.scalars.return_value.first.return_value = None

        with pytest.raises(CampaignNotFound):
            list_campaign_push_requests(campaign_id="camp-of-someone-else", slug="cafe-central")


class TestAdminEndpoints:
    """/api/admin/push-requests"""

    def test_requires_operator(self, test_client):
        response = test_client.post("/api/admin/push-requests/req-1/reject", json={})

        assert response.status_code == 401

    @patch("src.admin.blueprints.push_requests.list_push_requests")
    def test_list(self, mock_list, operator_client):
        mock_list.return_value = [{"id": "req-1", "status": "pending"}]

        response = operator_client.get("/api/admin/push-requests?campaignId=camp-1")

        assert response.status_code == 200
        assert response.get_json() == {"requests": [{"id": "req-1", "status": "pending"}]}
        mock_list.assert_called_once_with("camp-1")

    @patch("src.admin.blueprints.push_requests.reject_push_request", return_value=1)
    def test_reject(self, mock_reject, operator_client):
        response = operator_client.post("/api/admin/push-requests/req-1/reject", json={"reason": "Spam"})

        assert response.status_code == 200
        assert response.get_json() == {"success": True}
        mock_reject.assert_called_once_with("req-1", "Spam")

    @patch("src.admin.blueprints.push_requests.reject_push_request", return_value=0)
    def test_reject_without_body_or_match_still_succeeds(self, mock_reject, operator_client):
        response = operator_client.post("/api/admin/push-requests/missing/reject")

        assert response.status_code == 200
        mock_reject.assert_called_once_with("missing", None)

    @patch("src.admin.blueprints.push_requests.reject_push_request")
    def test_reject_store_failure(self, mock_reject, operator_client):
        mock_reject.side_effect = OperationalError("UPDATE", {}, Exception("connection lost"))

        response = operator_client.post("/api/admin/push-requests/req-1/reject", json={})

        assert response.status_code == 500
        assert response.get_json() == {"error": "Failed to reject request"}

    @patch("src.admin.blueprints.push_requests.approve_push_request")
    def test_approve_not_pending(self, mock_approve, operator_client):
        mock_approve.side_effect = InvalidTransition("Request is not pending")

        response = operator_client.post("/api/admin/push-requests/req-1/approve")

        assert response.status_code == 400
        assert response.get_json() == {"error": "Request is not pending"}

    @patch("src.admin.blueprints.push_requests.approve_push_request")
    def test_approve_missing(self, mock_approve, operator_client):
        mock_approve.side_effect = PushRequestNotFound()

        response = operator_client.post("/api/admin/push-requests/req-1/approve")

        assert response.status_code == 404

    def test_edit_blank_message(self, operator_client):
        response = operator_client.post("/api/admin/push-requests/req-1/edit", json={"message": "   "})

        assert response.status_code == 400
        assert response.get_json() == {"error": "Message is required"}

    @patch("src.admin.blueprints.push_requests.edit_push_request")
    def test_edit(self, mock_edit, operator_client):
        mock_edit.return_value = {"id": "req-1", "edited_message": "Fixed"}

        response = operator_client.post("/api/admin/push-requests/req-1/edit", json={"message": "Fixed"})

        assert response.status_code == 200
        assert response.get_json()["request"]["edited_message"] == "Fixed"


class TestPosEndpoints:
    """/api/pos/push-request"""

    def test_requires_pin_session(self, test_client):
        response = test_client.post("/api/pos/push-request", json={"slug": "cafe-central", "message": "Hi"})

        assert response.status_code == 401

    @patch("src.admin.blueprints.pos.create_push_request")
    @patch("src.admin.utils.helpers.resolve_session", return_value="staff")
    def test_staff_can_submit(self, mock_resolve, mock_create, test_client):
        mock_create.return_value = {"id": "req-1", "status": "pending"}
        test_client.set_cookie("auth_cafe-central", "tok")

        response = test_client.post(
            "/api/pos/push-request",
            json={"slug": "cafe-central", "message": "Hi", "scheduledAt": "2026-12-24T18:00:00Z"},
        )

        assert response.status_code == 200
        assert response.get_json() == {"success": True, "request": {"id": "req-1", "status": "pending"}}
        slug, message, scheduled_at = mock_create.call_args[0]
        assert (slug, message) == ("cafe-central", "Hi")
        assert scheduled_at.year == 2026

    @patch("src.admin.utils.helpers.resolve_session", return_value="staff")
    def test_missing_message(self, mock_resolve, test_client):
        test_client.set_cookie("auth_cafe-central", "tok")

        response = test_client.post("/api/pos/push-request", json={"slug": "cafe-central"})

        assert response.status_code == 400

    @patch("src.admin.blueprints.pos.list_campaign_push_requests")
    def test_operator_lists_by_campaign(self, mock_list, operator_client):
        mock_list.return_value = []

        response = operator_client.get("/api/pos/push-request?campaignId=camp-1")

        assert response.status_code == 200
        mock_list.assert_called_once_with(campaign_id="camp-1", slug=None)
