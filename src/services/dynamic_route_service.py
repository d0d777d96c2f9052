"""Short QR codes that resolve to a campaign start page."""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from src.core.database.database_session import get_db_session
from src.core.database.models import DynamicRoute

logger = logging.getLogger(__name__)

# No 0/O or 1/I, codes get typed in from printed material
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 10

UNIQUE_VIOLATION = "23505"


class CodeGenerationError(Exception):
    """Raised when no free code was found within MAX_CODE_ATTEMPTS."""


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def generate_code(choice: Callable[[str], str] = secrets.choice) -> str:
    return "".join(choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def start_path(target_slug: str) -> str:
    return f"/start/{target_slug}"


def resolve_code(code: str) -> str | None:
    """Return the target slug of an active route, or None.

    Lookup is case-insensitive: the code is uppercased before it reaches the
    store, where codes are kept uppercase.
    """
    normalized = normalize_code(code)
    if not normalized:
        return None

    with get_db_session() as db:
        route = db.scalars(select(DynamicRoute).filter_by(code=normalized)).first()
        if not route or not route.is_active:
            return None
        return route.target_slug


def get_route_for_client(client_id: str) -> dict[str, Any] | None:
    with get_db_session() as db:
        route = db.scalars(select(DynamicRoute).filter_by(client_id=client_id)).first()
        return route.to_dict() if route else None


def _is_unique_violation(error: IntegrityError) -> bool:
    return getattr(error.orig, "pgcode", None) == UNIQUE_VIOLATION


def upsert_route_for_client(
    client_id: str,
    target_slug: str,
    code_factory: Callable[[], str] = generate_code,
) -> tuple[dict[str, Any], bool]:
    """Point the client's route at target_slug, creating the route if needed.

    Returns:
        (route, created) where created is False when an existing route was updated.

    Raises:
        CodeGenerationError: every generated code collided with an existing one
        IntegrityError: any other constraint failure (unknown client, ...)
    """
    with get_db_session() as db:
        existing = db.scalars(select(DynamicRoute).filter_by(client_id=client_id)).first()
        if existing:
            existing.target_slug = target_slug
            existing.updated_at = datetime.now(UTC)
            db.commit()
            logger.info(f"Dynamic route {existing.code} now targets {target_slug}")
            return existing.to_dict(), False

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            route = DynamicRoute(client_id=client_id, code=code_factory(), target_slug=target_slug, is_active=True)
            db.add(route)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                if not _is_unique_violation(e):
                    raise
                logger.warning(f"Dynamic route code collision on attempt {attempt}, retrying")
                continue

            logger.info(f"Created dynamic route {route.code} -> {target_slug} for client {client_id}")
            return route.to_dict(), True

    raise CodeGenerationError("Could not generate unique code")
