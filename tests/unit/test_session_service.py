"""Tests for PIN login and server-side client sessions."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, Mock, patch

import pytest

from src.core.database.models import ClientSession
from src.services.session_service import (
    ADMIN_SESSION_MAX_AGE,
    BUSINESS_NOT_FOUND,
    INVALID_PIN,
    ROLE_ADMIN,
    ROLE_STAFF,
    STAFF_SESSION_MAX_AGE,
    LoginResult,
    purge_expired_sessions,
    resolve_session,
    revoke_session,
    session_cookie_name,
    verify_pin_and_login,
)


def _client(admin_pin="1111", staff_pin="2222"):
    client = Mock()
    client.id = "client-1"
    client.slug = "cafe-central"
    client.admin_pin = admin_pin
    client.staff_pin = staff_pin
    return client


@pytest.fixture
def db():
    with patch("src.services.session_service.get_db_session") as mock_get_db_session:
        mock_session = MagicMock()
        mock_get_db_session.return_value.__enter__.return_value = mock_session
        yield mock_session


class TestVerifyPinAndLogin:
    """PIN checks against the business looked up by slug."""

    def test_unknown_slug_is_not_found(self, db):
        db.scalars.return_value.first.return_value = None

        result = verify_pin_and_login("nope", "1111")

        assert not result.success
        assert result.error == BUSINESS_NOT_FOUND
        assert result.status_code == 404
        assert result.token is None
        db.add.assert_not_called()

    def test_admin_pin_opens_dashboard(self, db):
        db.scalars.return_value.first.return_value = _client()

        result = verify_pin_and_login("cafe-central", "1111")

        assert result.success
        assert result.role == ROLE_ADMIN
        assert result.max_age == ADMIN_SESSION_MAX_AGE == 86400
        assert result.redirect == "/client/cafe-central"
        assert result.token

        stored = db.add.call_args[0][0]
        assert isinstance(stored, ClientSession)
        assert stored.token == result.token
        assert stored.role == ROLE_ADMIN
        assert stored.client_id == "client-1"
        db.commit.assert_called_once()

    def test_staff_pin_opens_pos(self, db):
        db.scalars.return_value.first.return_value = _client()

        result = verify_pin_and_login("cafe-central", "2222")

        assert result.success
        assert result.role == ROLE_STAFF
        assert result.max_age == STAFF_SESSION_MAX_AGE == 43200
        assert result.redirect == "/pos/cafe-central"

    def test_staff_session_expires_after_twelve_hours(self, db):
        db.scalars.return_value.first.return_value = _client()
        before = datetime.now(UTC)

        verify_pin_and_login("cafe-central", "2222")

        stored = db.add.call_args[0][0]
        assert before + timedelta(hours=12) <= stored.expires_at <= datetime.now(UTC) + timedelta(hours=12)

    def test_admin_pin_wins_when_both_pins_match(self, db):
        db.scalars.return_value.first.return_value = _client(admin_pin="1234", staff_pin="1234")

        result = verify_pin_and_login("cafe-central", "1234")

        assert result.role == ROLE_ADMIN

    def test_wrong_pin_is_rejected(self, db):
        db.scalars.return_value.first.return_value = _client()

        result = verify_pin_and_login("cafe-central", "9999")

        assert not result.success
        assert result.error == INVALID_PIN
        assert result.status_code == 401
        db.add.assert_not_called()

    def test_empty_pin_never_matches(self, db):
        db.scalars.return_value.first.return_value = _client(staff_pin="")

        result = verify_pin_and_login("cafe-central", "")

        assert result.error == INVALID_PIN

    def test_pin_is_compared_exactly(self, db):
        db.scalars.return_value.first.return_value = _client()

        result = verify_pin_and_login("cafe-central", " 1111 ")

        assert result.error == INVALID_PIN
        db.add.assert_not_called()

    def test_tokens_are_unique_per_login(self, db):
        db.scalars.return_value.first.return_value = _client()

        first = verify_pin_and_login("cafe-central", "1111")
        second = verify_pin_and_login("cafe-central", "1111")

        assert first.token != second.token


class TestLoginResult:
    def test_success_payload_hides_token(self):
        result = LoginResult(success=True, role="admin", redirect="/client/x", token="secret", max_age=86400)

        assert result.to_dict() == {"success": True, "role": "admin", "redirect": "/client/x"}

    def test_error_payload(self):
        assert LoginResult(success=False, error=INVALID_PIN).to_dict() == {"error": INVALID_PIN}


class TestSessionStore:
    def test_cookie_name_is_scoped_to_slug(self):
        assert session_cookie_name("cafe-central") == "auth_cafe-central"

    def test_resolve_without_token_skips_database(self):
        with patch("src.services.session_service.get_db_session") as mock_get_db_session:
            assert resolve_session("cafe-central", None) is None
            mock_get_db_session.assert_not_called()

    def test_resolve_returns_role(self, db):
        db.scalars.return_value.first.return_value = ROLE_STAFF

        assert resolve_session("cafe-central", "tok") == ROLE_STAFF

    def test_resolve_unknown_or_foreign_token(self, db):
        db.scalars.return_value.first.return_value = None

        assert resolve_session("other-shop", "tok") is None

    def test_revoke_deletes_row(self, db):
        revoke_session("tok")

        db.execute.assert_called_once()
        db.commit.assert_called_once()

    def test_revoke_ignores_missing_token(self, db):
        revoke_session(None)

        db.execute.assert_not_called()

    def test_purge_reports_removed_rows(self, db):
        db.execute.return_value.rowcount = 3

        assert purge_expired_sessions() == 3
        db.commit.assert_called_once()
