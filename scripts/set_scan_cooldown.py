#!/usr/bin/env python3
"""Set the scan cooldown of a campaign, e.g. to test repeated scans."""

import argparse
import sys

from rich.console import Console
from sqlalchemy import select

from src.core.config import load_env_file_settings
from src.core.database.database_session import get_db_session, get_engine
from src.core.database.models import Campaign, Client
from src.core.schemas import merge_campaign_config

console = Console()


def set_scan_cooldown(campaign_id: str | None, slug: str | None, minutes: int) -> bool:
    with get_db_session() as session:
        if campaign_id:
            campaign = session.get(Campaign, campaign_id)
        else:
            stmt = select(Campaign).join(Client).where(Client.slug == slug).order_by(Campaign.created_at)
            campaign = session.scalars(stmt).first()

        if not campaign:
            console.print("[red]Campaign not found[/red]")
            return False

        campaign.config = merge_campaign_config(campaign.config, {"scanCooldown": minutes})
        session.commit()

        console.print(f"[green]✓ {campaign.name}: scanCooldown = {minutes} min[/green]")
    return True


def main():
    parser = argparse.ArgumentParser(description="Set config.scanCooldown on a campaign")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--campaign-id", help="Campaign id")
    target.add_argument("--slug", help="Client slug (uses its first campaign)")
    parser.add_argument("--minutes", type=int, default=5, help="Cooldown in minutes (default: 5)")
    parser.add_argument("--env-file", default=".env.local", help="Env file with DATABASE_URL (default: .env.local)")
    args = parser.parse_args()

    if args.minutes < 0:
        parser.error("--minutes must be >= 0")

    get_engine(load_env_file_settings(args.env_file))
    if not set_scan_cooldown(args.campaign_id, args.slug, args.minutes):
        sys.exit(1)


if __name__ == "__main__":
    main()
