"""Public campaign start pages (target of the QR redirect)."""

import logging

from flask import Blueprint, render_template
from sqlalchemy import select

from src.core.database.database_session import get_db_session
from src.core.database.models import Campaign, Client
from src.core.schemas import load_campaign_config

logger = logging.getLogger(__name__)

# Create blueprint (no authentication required)
public_bp = Blueprint("public", __name__)


@public_bp.route("/start/<slug>")
def start(slug):
    """Landing page a customer reaches after scanning a campaign QR code."""
    with get_db_session() as db_session:
        stmt = (
            select(Client, Campaign)
            .join(Campaign, Campaign.client_id == Client.id)
            .where(Client.slug == slug, Campaign.is_active.is_(True))
            .order_by(Campaign.created_at)
        )
        row = db_session.execute(stmt).first()

        if row is None:
            logger.info(f"Start page requested for unknown or inactive campaign slug={slug}")
            return render_template("start.html", slug=slug, client=None, campaign=None), 404

        client, campaign = row
        config = load_campaign_config(campaign.config, campaign.id)
        return render_template(
            "start.html",
            slug=slug,
            client={"name": client.name, "slug": client.slug},
            campaign={"id": campaign.id, "name": campaign.name, "reward": config.reward},
        )
