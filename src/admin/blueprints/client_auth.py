"""PIN login for client businesses (dashboard and point-of-sale)."""

import logging

from flask import Blueprint, current_app, jsonify, redirect, render_template, request, url_for

from src.services.session_service import revoke_session, session_cookie_name, verify_pin_and_login

logger = logging.getLogger(__name__)

client_auth_bp = Blueprint("client_auth", __name__)


def _wants_json() -> bool:
    return request.is_json or request.accept_mimetypes.best == "application/json"


@client_auth_bp.route("/login/<slug>", methods=["GET"])
def login(slug):
    """PIN form for one business."""
    return render_template("client_login.html", slug=slug, error=None)


@client_auth_bp.route("/login/<slug>", methods=["POST"])
def login_submit(slug):
    """Check the PIN and set the auth_<slug> session cookie."""
    if request.is_json:
        data = request.get_json(silent=True) or {}
        pin = str(data.get("pin") or "")
    else:
        pin = request.form.get("pin", "")

    result = verify_pin_and_login(slug, pin)

    if not result.success:
        if _wants_json():
            return jsonify(result.to_dict()), result.status_code
        return render_template("client_login.html", slug=slug, error=result.error), result.status_code

    if _wants_json():
        response = jsonify(result.to_dict())
    else:
        response = redirect(result.redirect)

    response.set_cookie(
        session_cookie_name(slug),
        result.token,
        max_age=result.max_age,
        path="/",
        domain=current_app.config.get("SESSION_COOKIE_DOMAIN") or None,
        secure=True,
        httponly=True,
        samesite="Lax",
    )
    return response


@client_auth_bp.route("/logout/<slug>", methods=["POST"])
def logout(slug):
    """Drop the business session, server-side row included."""
    cookie_name = session_cookie_name(slug)
    revoke_session(request.cookies.get(cookie_name))

    if _wants_json():
        response = jsonify({"success": True})
    else:
        response = redirect(url_for("client_auth.login", slug=slug))
    response.delete_cookie(
        cookie_name,
        path="/",
        domain=current_app.config.get("SESSION_COOKIE_DOMAIN") or None,
        secure=True,
        httponly=True,
        samesite="Lax",
    )
    return response
