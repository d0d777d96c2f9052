"""Operator review of push requests submitted by client businesses."""

import logging

from flask import Blueprint, flash, jsonify, render_template, request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.admin.utils import log_admin_action, parse_json_body, require_auth, validation_error_message
from src.core.schemas import EditPushRequestBody, RejectPushRequestBody
from src.services.push_request_service import (
    PushRequestError,
    approve_push_request,
    edit_push_request,
    list_push_requests,
    reject_push_request,
)

logger = logging.getLogger(__name__)

push_requests_bp = Blueprint("push_requests", __name__)


@push_requests_bp.route("/api/admin/push-requests", methods=["GET"])
@require_auth(api_mode=True)
def list_requests():
    campaign_id = request.args.get("campaignId")
    try:
        requests = list_push_requests(campaign_id)
    except SQLAlchemyError as e:
        logger.error(f"Error listing push requests: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch requests"}), 500
    return jsonify({"requests": requests})


@push_requests_bp.route("/admin/push-requests")
@require_auth()
def push_requests_page():
    try:
        requests = list_push_requests(request.args.get("campaignId"))
    except SQLAlchemyError as e:
        logger.error(f"Error listing push requests: {e}", exc_info=True)
        flash("Could not load push requests", "error")
        requests = []
    return render_template("push_requests.html", requests=requests)


@push_requests_bp.route("/api/admin/push-requests/<request_id>/reject", methods=["POST"])
@require_auth(api_mode=True)
@log_admin_action("reject_push_request")
def reject_request(request_id):
    """Reject a push request.

    Request body:
    {
        "reason": "Optional rejection reason"
    }
    """
    try:
        try:
            body = parse_json_body(RejectPushRequestBody)
        except ValidationError as e:
            return jsonify({"error": validation_error_message(e)}), 400

        updated = reject_push_request(request_id, body.reason)
        if not updated:
            logger.info(f"Reject for unknown push request {request_id} matched no rows")
        return jsonify({"success": True}), 200

    except Exception as e:
        logger.error(f"Error rejecting push request {request_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to reject request"}), 500


@push_requests_bp.route("/api/admin/push-requests/<request_id>/approve", methods=["POST"])
@require_auth(api_mode=True)
@log_admin_action("approve_push_request")
def approve_request(request_id):
    try:
        push_request = approve_push_request(request_id)
    except PushRequestError as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Error approving push request {request_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to approve request"}), 500

    return jsonify({"success": True, "request": push_request})


@push_requests_bp.route("/api/admin/push-requests/<request_id>/edit", methods=["POST"])
@require_auth(api_mode=True)
@log_admin_action("edit_push_request")
def edit_request(request_id):
    try:
        body = parse_json_body(EditPushRequestBody)
    except ValidationError:
        return jsonify({"error": "Message is required"}), 400

    try:
        push_request = edit_push_request(request_id, body.message)
    except PushRequestError as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Error editing push request {request_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to edit request"}), 500

    return jsonify({"success": True, "request": push_request})
