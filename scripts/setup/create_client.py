#!/usr/bin/env python3
"""
Create a client business with its first campaign.
Prints the generated PINs once; they are not shown again.
"""

import argparse
import re
import secrets
import sys

from rich.console import Console
from rich.table import Table
from sqlalchemy import select

from src.core.config import load_env_file_settings
from src.core.database.database_session import get_db_session, get_engine
from src.core.database.models import Campaign, Client
from src.core.schemas import CampaignConfig

console = Console()

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def generate_pin(length: int = 4) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


def create_client(args):
    """Create the client and campaign rows."""
    slug = args.slug or slugify(args.name)
    if not _SLUG_RE.match(slug):
        console.print(f"[red]Error: invalid slug '{slug}'[/red]")
        sys.exit(1)

    admin_pin = args.admin_pin or generate_pin()
    staff_pin = args.staff_pin or generate_pin()
    while staff_pin == admin_pin:
        staff_pin = generate_pin()

    config = CampaignConfig(scan_cooldown=args.scan_cooldown, reward=args.reward)

    with get_db_session() as session:
        existing = session.scalars(select(Client).filter_by(slug=slug)).first()
        if existing:
            console.print(f"[red]Error: Client '{slug}' already exists[/red]")
            sys.exit(1)

        client = Client(name=args.name, slug=slug, admin_pin=admin_pin, staff_pin=staff_pin)
        session.add(client)
        session.flush()

        campaign = Campaign(
            client_id=client.id,
            name=args.campaign_name or args.name,
            is_active=True,
            config=config.model_dump(by_alias=True, exclude_none=True),
        )
        session.add(campaign)
        session.commit()

        table = Table(title=f"Client {args.name}")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Client ID", client.id)
        table.add_row("Slug", slug)
        table.add_row("Campaign ID", campaign.id)
        table.add_row("Admin PIN", admin_pin)
        table.add_row("Staff PIN", staff_pin)
        table.add_row("Login", f"/login/{slug}")
        console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Create a client business")
    parser.add_argument("name", help='Business display name (e.g., "Café Central")')
    parser.add_argument("--slug", help="URL slug (default: generated from name)")
    parser.add_argument("--campaign-name", help="First campaign name (default: business name)")
    parser.add_argument("--admin-pin", help="Admin PIN (default: random 4 digits)")
    parser.add_argument("--staff-pin", help="Staff PIN (default: random 4 digits)")
    parser.add_argument("--reward", help="Reward text shown on completed cards")
    parser.add_argument("--scan-cooldown", type=int, help="Minutes between two scans of one pass")
    parser.add_argument("--env-file", default=".env.local", help="Env file with DATABASE_URL (default: .env.local)")
    args = parser.parse_args()

    get_engine(load_env_file_settings(args.env_file))
    create_client(args)


if __name__ == "__main__":
    main()
