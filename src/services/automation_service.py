"""Automation rules: scheduled messages attached to a campaign.

Rules are only stored and edited here. Running them belongs to the scheduler
that delivers wallet notifications.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select

from src.core.database.database_session import get_db_session
from src.core.database.models import AutomationRule, Campaign, Client
from src.core.schemas import CreateAutomationRuleBody, UpdateAutomationRuleBody, parse_automation_config
from src.services.push_request_service import CampaignNotFound

logger = logging.getLogger(__name__)


class AutomationRuleNotFound(Exception):
    status_code = 404

    def __init__(self, message: str = "Rule not found"):
        super().__init__(message)


def _resolve_campaign_id(db, campaign_id: str | None, slug: str | None) -> str:
    """Campaign id given directly, or the first campaign of the business slug.

    When both are given the campaign must belong to that business.
    """
    if campaign_id:
        stmt = select(Campaign.id).where(Campaign.id == campaign_id)
        if slug:
            stmt = stmt.join(Client).where(Client.slug == slug)
        found = db.scalars(stmt).first()
    elif slug:
        stmt = (
            select(Campaign.id)
            .join(Client)
            .where(Client.slug == slug)
            .order_by(Campaign.created_at)
        )
        found = db.scalars(stmt).first()
    else:
        found = None

    if not found:
        raise CampaignNotFound()
    return found


def _get_rule(db, rule_id: str, slug: str | None) -> AutomationRule:
    stmt = select(AutomationRule).where(AutomationRule.id == rule_id)
    if slug:
        stmt = stmt.join(Campaign).join(Client).where(Client.slug == slug)
    rule = db.scalars(stmt).first()
    if not rule:
        raise AutomationRuleNotFound()
    return rule


def list_rules(campaign_id: str | None = None, slug: str | None = None) -> list[dict[str, Any]]:
    """Rules of one campaign, newest first."""
    with get_db_session() as db:
        resolved = _resolve_campaign_id(db, campaign_id, slug)
        stmt = (
            select(AutomationRule)
            .where(AutomationRule.campaign_id == resolved)
            .order_by(AutomationRule.created_at.desc())
        )
        return [r.to_dict() for r in db.scalars(stmt).all()]


def create_rule(body: CreateAutomationRuleBody) -> dict[str, Any]:
    """Store a new rule.

    Raises:
        pydantic.ValidationError: config does not fit the rule type
        CampaignNotFound: no campaign for the given id or slug
    """
    config = parse_automation_config(body.rule_type, body.config)

    with get_db_session() as db:
        campaign_id = _resolve_campaign_id(db, body.campaign_id, body.slug)
        rule = AutomationRule(
            campaign_id=campaign_id,
            name=body.name,
            rule_type=body.rule_type,
            config=config,
            message_template=body.message_template,
            is_enabled=body.is_enabled,
        )
        db.add(rule)
        db.commit()
        data = rule.to_dict()

    logger.info(f'[AUTOMATION] Created rule "{body.name}" ({body.rule_type}) for campaign {campaign_id}')
    return data


def update_rule(body: UpdateAutomationRuleBody, slug: str | None = None) -> dict[str, Any]:
    """Apply the fields present in body to an existing rule.

    A new config is validated against the rule's stored type.
    """
    with get_db_session() as db:
        rule = _get_rule(db, body.id, slug)

        if body.name is not None:
            rule.name = body.name
        if body.config is not None:
            rule.config = parse_automation_config(rule.rule_type, body.config)
        if body.message_template is not None:
            rule.message_template = body.message_template
        if body.is_enabled is not None:
            rule.is_enabled = body.is_enabled
        rule.updated_at = datetime.now(UTC)

        db.commit()
        data = rule.to_dict()

    logger.info(f"[AUTOMATION] Updated rule {body.id}")
    return data


def delete_rule(rule_id: str, slug: str | None = None) -> None:
    with get_db_session() as db:
        rule = _get_rule(db, rule_id, slug)
        db.delete(rule)
        db.commit()

    logger.info(f"[AUTOMATION] Deleted rule {rule_id}")
