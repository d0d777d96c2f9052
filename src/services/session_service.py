"""PIN login and server-side sessions for client businesses.

A client business has two PINs: the admin PIN opens the business dashboard,
the staff PIN opens the point-of-sale screen. A successful login stores an
opaque token in client_sessions; the browser only ever holds that token in
the auth_<slug> cookie.
"""

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select

from src.core.database.database_session import get_db_session
from src.core.database.models import Client, ClientSession

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"

ADMIN_SESSION_MAX_AGE = 60 * 60 * 24  # 24h
STAFF_SESSION_MAX_AGE = 60 * 60 * 12  # 12h

BUSINESS_NOT_FOUND = "Business not found"
INVALID_PIN = "Invalid PIN"


@dataclass
class LoginResult:
    """Outcome of a PIN login attempt."""

    success: bool
    role: str | None = None
    redirect: str | None = None
    token: str | None = None
    max_age: int | None = None
    error: str | None = None
    status_code: int = 200

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "role": self.role, "redirect": self.redirect}
        return {"error": self.error}


def session_cookie_name(slug: str) -> str:
    return f"auth_{slug}"


def _pin_matches(submitted: str, stored: str | None) -> bool:
    if not submitted or not stored:
        return False
    return hmac.compare_digest(submitted.encode("utf-8"), stored.encode("utf-8"))


def verify_pin_and_login(slug: str, pin: str) -> LoginResult:
    """Check a PIN against the business identified by slug and open a session.

    Args:
        slug: Business slug from the login URL
        pin: Submitted PIN, compared by plain equality

    Returns:
        LoginResult with the role, redirect target and session token on success,
        or an error message and HTTP status on failure.
    """
    pin = pin or ""

    with get_db_session() as db:
        client = db.scalars(select(Client).filter_by(slug=slug)).first()
        if not client:
            logger.info(f"PIN login for unknown business slug={slug}")
            return LoginResult(success=False, error=BUSINESS_NOT_FOUND, status_code=404)

        if _pin_matches(pin, client.admin_pin):
            role, max_age, redirect = ROLE_ADMIN, ADMIN_SESSION_MAX_AGE, f"/client/{slug}"
        elif _pin_matches(pin, client.staff_pin):
            role, max_age, redirect = ROLE_STAFF, STAFF_SESSION_MAX_AGE, f"/pos/{slug}"
        else:
            logger.info(f"Invalid PIN for business slug={slug}")
            return LoginResult(success=False, error=INVALID_PIN, status_code=401)

        token = secrets.token_urlsafe(32)
        db.add(
            ClientSession(
                token=token,
                client_id=client.id,
                role=role,
                expires_at=datetime.now(UTC) + timedelta(seconds=max_age),
            )
        )
        db.commit()

    logger.info(f"PIN login succeeded for slug={slug} role={role}")
    return LoginResult(success=True, role=role, redirect=redirect, token=token, max_age=max_age)


def resolve_session(slug: str, token: str | None) -> str | None:
    """Return the role bound to a session token, or None.

    The token must exist, must not be expired and must belong to the business
    named by slug. A token issued for one business never opens another.
    """
    if not token:
        return None

    with get_db_session() as db:
        stmt = (
            select(ClientSession.role)
            .join(Client, ClientSession.client_id == Client.id)
            .where(
                ClientSession.token == token,
                Client.slug == slug,
                ClientSession.expires_at > datetime.now(UTC),
            )
        )
        return db.scalars(stmt).first()


def revoke_session(token: str | None) -> None:
    """Delete a session token. Unknown tokens are ignored."""
    if not token:
        return

    with get_db_session() as db:
        db.execute(delete(ClientSession).where(ClientSession.token == token))
        db.commit()


def purge_expired_sessions() -> int:
    """Delete every expired session row and return how many were removed."""
    with get_db_session() as db:
        result = db.execute(delete(ClientSession).where(ClientSession.expires_at <= datetime.now(UTC)))
        db.commit()
        return result.rowcount or 0
