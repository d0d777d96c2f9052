"""Tests for QR code resolution and the dynamic route API."""

from unittest.mock import MagicMock, Mock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from src.services.dynamic_route_service import (
    CODE_ALPHABET,
    CODE_LENGTH,
    MAX_CODE_ATTEMPTS,
    CodeGenerationError,
    generate_code,
    normalize_code,
    resolve_code,
    upsert_route_for_client,
)


def _route(code="ABC123", target_slug="summer-promo", is_active=True):
    route = Mock()
    route.code = code
    route.target_slug = target_slug
    route.is_active = is_active
    route.to_dict.return_value = {"code": code, "target_slug": target_slug, "is_active": is_active}
    return route


def _unique_violation():
    orig = Exception("duplicate key value violates unique constraint")
    orig.pgcode = "23505"
    return IntegrityError("INSERT INTO dynamic_routes", {}, orig)


@pytest.fixture
def db():
    with patch("src.services.dynamic_route_service.get_db_session") as mock_get_db_session:
        mock_session = MagicMock()
        mock_get_db_session.return_value.__enter__.return_value = mock_session
        yield mock_session


class TestCodes:
    def test_normalize_uppercases_and_strips(self):
        assert normalize_code(" abc123 ") == "ABC123"

    def test_generated_codes_use_unambiguous_alphabet(self):
        for _ in range(50):
            code = generate_code()
            assert len(code) == CODE_LENGTH
            assert set(code) <= set(CODE_ALPHABET)

        for ambiguous in "01IO":
            assert ambiguous not in CODE_ALPHABET


class TestResolveCode:
    def test_active_route_returns_target(self, db):
        db.scalars.return_value.first.return_value = _route()

        assert resolve_code("abc123") == "summer-promo"

    def test_lookup_uses_uppercase_code(self, db):
        db.scalars.return_value.first.return_value = None

        resolve_code("abc123")

        stmt = db.scalars.call_args[0][0]
        assert "ABC123" in str(stmt.compile(compile_kwargs={"literal_binds": True}))

    def test_inactive_route_is_not_resolved(self, db):
        db.scalars.return_value.first.return_value = _route(is_active=False)

        assert resolve_code("ABC123") is None

    def test_resolution_never_writes(self, db):
        db.scalars.return_value.first.return_value = _route()

        resolve_code("ABC123")

        db.add.assert_not_called()
        db.commit.assert_not_called()


class TestUpsertRoute:
    def test_existing_route_is_retargeted(self, db):
        existing = _route(target_slug="old")
        db.scalars.return_value.first.return_value = existing

        route, created = upsert_route_for_client("client-1", "new-slug")

        assert created is False
        assert existing.target_slug == "new-slug"
        db.add.assert_not_called()
        db.commit.assert_called_once()

    def test_new_route_gets_generated_code(self, db):
        db.scalars.return_value.first.return_value = None

        route, created = upsert_route_for_client("client-1", "summer-promo", code_factory=lambda: "QWERTY23")

        assert created is True
        assert route["code"] == "QWERTY23"
        assert route["target_slug"] == "summer-promo"
        assert route["is_active"] is True

    def test_collision_retries_with_fresh_code(self, db):
        db.scalars.return_value.first.return_value = None
        db.commit.side_effect = [_unique_violation(), None]
        codes = iter(["TAKEN234", "FREE2345"])

        route, created = upsert_route_for_client("client-1", "summer-promo", code_factory=lambda: next(codes))

        assert created is True
        assert route["code"] == "FREE2345"
        db.rollback.assert_called_once()

    def test_gives_up_after_max_attempts(self, db):
        db.scalars.return_value.first.return_value = None
        db.commit.side_effect = _unique_violation()

        with pytest.raises(CodeGenerationError, match="Could not generate unique code"):
            upsert_route_for_client("client-1", "summer-promo")

        assert db.commit.call_count == MAX_CODE_ATTEMPTS

    def test_other_integrity_errors_propagate(self, db):
        db.scalars.return_value.first.return_value = None
        orig = Exception("insert or update violates foreign key constraint")
        orig.pgcode = "23503"
        db.commit.side_effect = IntegrityError("INSERT", {}, orig)

        with pytest.raises(IntegrityError):
            upsert_route_for_client("missing-client", "summer-promo")

        assert db.commit.call_count == 1


class TestRedirectEndpoint:
    """GET /d/<code>"""

    @patch("src.admin.blueprints.dynamic_routes.resolve_code", return_value="summer-promo")
    def test_active_code_redirects_with_303(self, mock_resolve, test_client):
        response = test_client.get("/d/abc123")

        assert response.status_code == 303
        assert response.headers["Location"].endswith("/start/summer-promo")
        mock_resolve.assert_called_once_with("abc123")

    @patch("src.admin.blueprints.dynamic_routes.resolve_code", return_value=None)
    def test_unknown_code_renders_not_found_page(self, mock_resolve, test_client):
        response = test_client.get("/d/ghost99")

        assert response.status_code == 404
        assert "Location" not in response.headers
        assert b"Link not found" in response.data
        assert b"ghost99" in response.data


class TestDynamicRouteApi:
    """/api/dynamic-routes"""

    def test_requires_operator(self, test_client):
        response = test_client.get("/api/dynamic-routes?clientId=client-1")

        assert response.status_code == 401

    def test_get_requires_client_id(self, operator_client):
        response = operator_client.get("/api/dynamic-routes")

        assert response.status_code == 400

    @patch("src.admin.blueprints.dynamic_routes.get_route_for_client", return_value=None)
    def test_get_without_route(self, mock_get, operator_client):
        response = operator_client.get("/api/dynamic-routes?clientId=client-1")

        assert response.status_code == 200
        assert response.get_json() == {"route": None}

    def test_post_validates_body(self, operator_client):
        response = operator_client.post("/api/dynamic-routes", json={"clientId": "client-1"})

        assert response.status_code == 400

    @patch("src.admin.blueprints.dynamic_routes.upsert_route_for_client")
    def test_post_creates_route(self, mock_upsert, operator_client):
        mock_upsert.return_value = ({"code": "ABCD2345", "target_slug": "summer-promo"}, True)

        response = operator_client.post(
            "/api/dynamic-routes", json={"clientId": "client-1", "targetSlug": "summer-promo"}
        )

        assert response.status_code == 200
        assert response.get_json() == {"route": {"code": "ABCD2345", "target_slug": "summer-promo"}, "created": True}
        mock_upsert.assert_called_once_with("client-1", "summer-promo")

    @patch("src.admin.blueprints.dynamic_routes.upsert_route_for_client")
    def test_post_reports_exhausted_codes(self, mock_upsert, operator_client):
        mock_upsert.side_effect = CodeGenerationError("Could not generate unique code")

        response = operator_client.post(
            "/api/dynamic-routes", json={"clientId": "client-1", "targetSlug": "summer-promo"}
        )

        assert response.status_code == 500
        assert response.get_json() == {"error": "Could not generate unique code"}
