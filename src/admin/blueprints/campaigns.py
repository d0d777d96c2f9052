"""Operator campaign API: read a campaign and update its settings."""

import logging

from flask import Blueprint, jsonify
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.admin.utils import log_admin_action, parse_json_body, require_auth, validation_error_message
from src.core.schemas import UpdateCampaignBody
from src.services.campaign_service import get_campaign, update_campaign
from src.services.push_request_service import CampaignNotFound

logger = logging.getLogger(__name__)

campaigns_bp = Blueprint("campaigns", __name__)


@campaigns_bp.route("/api/campaign/<campaign_id>", methods=["GET"])
@require_auth(api_mode=True)
def get_campaign_api(campaign_id):
    try:
        campaign = get_campaign(campaign_id)
    except CampaignNotFound as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Error fetching campaign {campaign_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch campaign"}), 500
    return jsonify({"campaign": campaign})


@campaigns_bp.route("/api/campaign/<campaign_id>/update", methods=["POST"])
@require_auth(api_mode=True)
@log_admin_action("update_campaign")
def update_campaign_api(campaign_id):
    """Update a campaign.

    Request body (all fields optional):
    {
        "name": "Coffee Stamps",
        "isActive": true,
        "config": {"scanCooldown": 5}
    }

    Config keys are merged into the stored config; keys not sent are kept.
    """
    try:
        body = parse_json_body(UpdateCampaignBody)
        if body.name is None and body.is_active is None and body.config is None:
            return jsonify({"error": "No changes provided"}), 400
        campaign = update_campaign(campaign_id, body)
    except ValidationError as e:
        return jsonify({"error": validation_error_message(e)}), 400
    except CampaignNotFound as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Error updating campaign {campaign_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to update campaign"}), 500

    return jsonify({"success": True, "campaign": campaign})
