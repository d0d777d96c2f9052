"""Core application routes blueprint."""

import logging

from flask import Blueprint, redirect, render_template, url_for
from sqlalchemy import func, select, text

from src.admin.utils import require_auth
from src.core.database.database_session import get_db_session
from src.core.database.models import Campaign, Client, DynamicRoute, PushRequest
from src.services.push_request_service import STATUS_PENDING, list_push_requests

logger = logging.getLogger(__name__)

# Create blueprint
core_bp = Blueprint("core", __name__)


@core_bp.route("/")
def index():
    return redirect(url_for("core.dashboard"))


@core_bp.route("/admin")
@require_auth()
def dashboard():
    """Operator dashboard with counts and the latest push requests."""
    with get_db_session() as db_session:
        stats = {
            "clients": db_session.scalar(select(func.count()).select_from(Client)) or 0,
            "active_campaigns": db_session.scalar(
                select(func.count()).select_from(Campaign).where(Campaign.is_active.is_(True))
            )
            or 0,
            "pending_requests": db_session.scalar(
                select(func.count()).select_from(PushRequest).where(PushRequest.status == STATUS_PENDING)
            )
            or 0,
            "dynamic_routes": db_session.scalar(select(func.count()).select_from(DynamicRoute)) or 0,
        }

    recent_requests = list_push_requests()[:10]
    return render_template("dashboard.html", stats=stats, requests=recent_requests)


@core_bp.route("/health")
def health():
    """Health check endpoint."""
    try:
        with get_db_session() as db_session:
            db_session.execute(text("SELECT 1"))
            return "OK", 200
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return f"Database connection failed: {str(e)}", 500
