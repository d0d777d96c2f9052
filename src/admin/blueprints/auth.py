"""Operator authentication blueprint for the /admin area."""

import hmac
import logging

from flask import Blueprint, flash, redirect, render_template, request, session, url_for

from src.admin.utils import safe_next_url
from src.core.config import get_admin_auth_config

logger = logging.getLogger(__name__)

# Create Blueprint
auth_bp = Blueprint("auth", __name__)


def _credentials_match(email: str, password: str) -> bool:
    config = get_admin_auth_config()
    if not config.is_configured:
        return False
    email_ok = hmac.compare_digest(email.strip().lower().encode(), config.email.strip().lower().encode())
    password_ok = hmac.compare_digest(password.encode(), config.password.encode())
    return email_ok and password_ok


@auth_bp.route("/admin/login", methods=["GET", "POST"])
def login():
    """Operator login form."""
    next_url = safe_next_url(request.values.get("next"), url_for("core.dashboard"))

    if "user" in session:
        return redirect(next_url)

    if request.method == "POST":
        email = request.form.get("email", "")
        password = request.form.get("password", "")

        if not get_admin_auth_config().is_configured:
            logger.error("Operator login attempted but ADMIN_EMAIL/ADMIN_PASSWORD are not set")
            flash("Admin login is not configured", "error")
        elif _credentials_match(email, password):
            session.clear()
            session["user"] = email.strip().lower()
            session.permanent = True
            logger.info(f"Operator {session['user']} logged in")
            flash(f"Welcome {session['user']}!", "success")
            return redirect(next_url)
        else:
            logger.info("Operator login failed")
            flash("Invalid email or password", "error")

    return render_template("admin_login.html", next_url=next_url), 200 if request.method == "GET" else 401


@auth_bp.route("/admin/logout")
def logout():
    """Log out the current operator."""
    session.clear()
    flash("You have been logged out", "info")
    return redirect(url_for("auth.login"))
