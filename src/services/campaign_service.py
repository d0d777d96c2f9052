"""Campaign read and update for the operator dashboard."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from src.core.database.database_session import get_db_session
from src.core.database.models import Campaign, Pass
from src.core.schemas import CampaignConfig, UpdateCampaignBody, merge_campaign_config
from src.services.push_request_service import CampaignNotFound

logger = logging.getLogger(__name__)


def get_campaign(campaign_id: str) -> dict[str, Any]:
    """Campaign with its client and passes, newest pass first."""
    with get_db_session() as db:
        campaign = db.scalars(
            select(Campaign).options(joinedload(Campaign.client)).where(Campaign.id == campaign_id)
        ).first()
        if not campaign:
            raise CampaignNotFound()

        passes = db.scalars(
            select(Pass).where(Pass.campaign_id == campaign_id).order_by(Pass.created_at.desc())
        ).all()

        data = campaign.to_dict()
        client = campaign.client
        data["client"] = {"name": client.name, "slug": client.slug} if client else None
        data["passes"] = [p.to_dict() for p in passes]
        return data


def update_campaign(campaign_id: str, body: UpdateCampaignBody) -> dict[str, Any]:
    """Apply name, active flag and config changes to a campaign.

    Config changes are merged over the stored bag, so keys the caller does not
    send are kept.

    Raises:
        pydantic.ValidationError: a known config field has an invalid value
        CampaignNotFound: no campaign with that id
    """
    if body.config is not None:
        CampaignConfig.model_validate(body.config)

    with get_db_session() as db:
        campaign = db.get(Campaign, campaign_id)
        if not campaign:
            raise CampaignNotFound()

        if body.name is not None:
            campaign.name = body.name
        if body.is_active is not None:
            campaign.is_active = body.is_active
        if body.config is not None:
            campaign.config = merge_campaign_config(campaign.config, body.config)

        db.commit()
        logger.info(f"Campaign {campaign_id} updated")
        return campaign.to_dict()
