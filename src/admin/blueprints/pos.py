"""Business-facing pages behind the PIN login, and the point-of-sale push request API."""

import logging

from flask import Blueprint, abort, g, jsonify, render_template, request
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from src.admin.utils import (
    parse_json_body,
    require_client_role,
    slug_from_json_or_args,
    validation_error_message,
)
from src.core.database.database_session import get_db_session
from src.core.database.models import Client
from src.core.schemas import CreatePushRequestBody, load_campaign_config
from src.services.dynamic_route_service import get_route_for_client
from src.services.push_request_service import (
    PushRequestError,
    create_push_request,
    list_campaign_push_requests,
)
from src.services.session_service import ROLE_ADMIN, ROLE_STAFF

logger = logging.getLogger(__name__)

pos_bp = Blueprint("pos", __name__)


def _load_client(slug):
    with get_db_session() as db_session:
        client = db_session.scalars(
            select(Client).options(selectinload(Client.campaigns)).filter_by(slug=slug)
        ).first()
        if not client:
            return None
        data = client.to_dict(include_campaigns=True)
        data["campaign_configs"] = {
            c.id: load_campaign_config(c.config, c.id).model_dump(exclude_none=True)
            for c in client.campaigns
        }
        return data


@pos_bp.route("/client/<slug>")
@require_client_role(ROLE_ADMIN)
def client_dashboard(slug):
    """Business owner dashboard."""
    client = _load_client(slug)
    if not client:
        abort(404)

    route = get_route_for_client(client["id"])
    requests = list_campaign_push_requests(slug=slug) if client["campaigns"] else []
    return render_template("client_dashboard.html", client=client, route=route, requests=requests)


@pos_bp.route("/pos/<slug>")
@require_client_role(ROLE_ADMIN, ROLE_STAFF)
def pos_page(slug):
    """Counter screen used by staff."""
    client = _load_client(slug)
    if not client:
        abort(404)

    requests = list_campaign_push_requests(slug=slug) if client["campaigns"] else []
    return render_template("pos.html", client=client, requests=requests, role=g.client_role)


@pos_bp.route("/api/pos/push-request", methods=["POST"])
@require_client_role(ROLE_ADMIN, ROLE_STAFF, api_mode=True, slug_from=slug_from_json_or_args)
def create_request():
    """Queue a push message for operator approval.

    Request body:
    {
        "slug": "business-slug",
        "message": "Text shown on the pass",
        "scheduledAt": "2026-01-31T18:00:00Z"   (optional)
    }
    """
    try:
        body = parse_json_body(CreatePushRequestBody)
    except ValidationError as e:
        return jsonify({"error": validation_error_message(e)}), 400

    try:
        push_request = create_push_request(body.slug, body.message, body.scheduled_at)
    except PushRequestError as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Error creating push request for {body.slug}: {e}", exc_info=True)
        return jsonify({"error": "Failed to create request"}), 500

    return jsonify({"success": True, "request": push_request})


@pos_bp.route("/api/pos/push-request", methods=["GET"])
@require_client_role(ROLE_ADMIN, ROLE_STAFF, api_mode=True, slug_from=slug_from_json_or_args)
def list_requests():
    slug = request.args.get("slug")
    campaign_id = request.args.get("campaignId")
    if not slug and not campaign_id:
        return jsonify({"error": "slug or campaignId required"}), 400

    try:
        requests = list_campaign_push_requests(campaign_id=campaign_id, slug=slug)
    except PushRequestError as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Error listing push requests: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch requests"}), 500

    return jsonify({"requests": requests})
