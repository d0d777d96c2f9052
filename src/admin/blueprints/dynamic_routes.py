"""QR redirect (/d/<code>) and the dynamic route management API."""

import logging

from flask import Blueprint, jsonify, redirect, render_template, request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.admin.utils import log_admin_action, parse_json_body, require_auth, validation_error_message
from src.core.schemas import UpsertDynamicRouteBody
from src.services.dynamic_route_service import (
    CodeGenerationError,
    get_route_for_client,
    normalize_code,
    resolve_code,
    start_path,
    upsert_route_for_client,
)

logger = logging.getLogger(__name__)

dynamic_routes_bp = Blueprint("dynamic_routes", __name__)


@dynamic_routes_bp.route("/d/<code>")
def resolve(code):
    """Send a scanned QR code to its campaign start page."""
    target_slug = resolve_code(code)
    if target_slug is None:
        logger.info(f"Dynamic route not found or inactive: {normalize_code(code)}")
        return render_template("link_not_found.html", code=code), 404

    return redirect(start_path(target_slug), code=303)


@dynamic_routes_bp.route("/api/dynamic-routes", methods=["GET"])
@require_auth(api_mode=True)
def get_route():
    client_id = request.args.get("clientId")
    if not client_id:
        return jsonify({"error": "clientId required"}), 400

    try:
        route = get_route_for_client(client_id)
    except SQLAlchemyError as e:
        logger.error(f"Error loading dynamic route for client {client_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to load route"}), 500

    return jsonify({"route": route})


@dynamic_routes_bp.route("/api/dynamic-routes", methods=["POST"])
@require_auth(api_mode=True)
@log_admin_action("upsert_dynamic_route")
def upsert_route():
    """Create the client's route, or retarget the one it already has."""
    try:
        body = parse_json_body(UpsertDynamicRouteBody)
    except ValidationError as e:
        return jsonify({"error": validation_error_message(e)}), 400

    try:
        route, created = upsert_route_for_client(body.client_id, body.target_slug)
    except CodeGenerationError as e:
        logger.error(f"Dynamic route code generation failed for client {body.client_id}")
        return jsonify({"error": str(e)}), 500
    except SQLAlchemyError as e:
        logger.error(f"Error saving dynamic route for client {body.client_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to save route"}), 500

    return jsonify({"route": route, "created": created})
