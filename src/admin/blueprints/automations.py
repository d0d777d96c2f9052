"""Automation rule API used by the business dashboard and operators."""

import logging

from flask import Blueprint, g, jsonify, request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.admin.utils import (
    parse_json_body,
    require_client_role,
    slug_from_json_or_args,
    validation_error_message,
)
from src.core.schemas import CreateAutomationRuleBody, UpdateAutomationRuleBody
from src.services.automation_service import (
    AutomationRuleNotFound,
    create_rule,
    delete_rule,
    list_rules,
    update_rule,
)
from src.services.push_request_service import CampaignNotFound
from src.services.session_service import ROLE_ADMIN

logger = logging.getLogger(__name__)

automations_bp = Blueprint("automations", __name__)

_require_business_admin = require_client_role(ROLE_ADMIN, api_mode=True, slug_from=slug_from_json_or_args)


def _owner_scope():
    """Business slug the caller is limited to; operators see every business."""
    return None if g.client_role == "operator" else g.client_slug


@automations_bp.route("/api/automations", methods=["GET"])
@_require_business_admin
def list_automation_rules():
    campaign_id = request.args.get("campaignId")
    slug = request.args.get("slug")
    if not campaign_id and not slug:
        return jsonify({"error": "Missing campaignId or slug"}), 400

    try:
        rules = list_rules(campaign_id, _owner_scope() or slug)
    except CampaignNotFound as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch automation rules: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch rules"}), 500

    return jsonify({"rules": rules})


@automations_bp.route("/api/automations", methods=["POST"])
@_require_business_admin
def create_automation_rule():
    try:
        body = parse_json_body(CreateAutomationRuleBody)
    except ValidationError:
        return jsonify({"error": "Missing required fields: name, ruleType, messageTemplate"}), 400

    if not body.campaign_id and not body.slug:
        return jsonify({"error": "Missing campaignId or slug"}), 400

    scope = _owner_scope()
    if scope:
        body.slug = scope

    try:
        rule = create_rule(body)
    except ValidationError as e:
        return jsonify({"error": validation_error_message(e)}), 400
    except CampaignNotFound as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Failed to create automation rule: {e}", exc_info=True)
        return jsonify({"error": "Failed to create rule"}), 500

    return jsonify({"success": True, "rule": rule})


@automations_bp.route("/api/automations", methods=["PUT"])
@_require_business_admin
def update_automation_rule():
    try:
        body = parse_json_body(UpdateAutomationRuleBody)
    except ValidationError:
        return jsonify({"error": "Missing rule id"}), 400

    try:
        rule = update_rule(body, _owner_scope())
    except ValidationError as e:
        return jsonify({"error": validation_error_message(e)}), 400
    except AutomationRuleNotFound as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Failed to update automation rule {body.id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to update rule"}), 500

    return jsonify({"success": True, "rule": rule})


@automations_bp.route("/api/automations", methods=["DELETE"])
@_require_business_admin
def delete_automation_rule():
    rule_id = request.args.get("id")
    if not rule_id:
        return jsonify({"error": "Missing rule id"}), 400

    try:
        delete_rule(rule_id, _owner_scope())
    except AutomationRuleNotFound as e:
        return jsonify({"error": str(e)}), e.status_code
    except SQLAlchemyError as e:
        logger.error(f"Failed to delete automation rule {rule_id}: {e}", exc_info=True)
        return jsonify({"error": "Failed to delete rule"}), 500

    return jsonify({"success": True})
