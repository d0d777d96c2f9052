#!/usr/bin/env python3
"""Print the stored state of one pass."""

import argparse
import sys

from rich.console import Console
from rich.table import Table
from sqlalchemy import select

from src.core.config import load_env_file_settings
from src.core.database.database_session import get_db_session, get_engine
from src.core.database.models import Pass
from src.core.schemas import PassState

console = Console()


def inspect_pass(pass_id: str) -> bool:
    """Show id, serial and customer-facing state of a pass. Returns False if missing."""
    with get_db_session() as session:
        stmt = select(Pass).where((Pass.id == pass_id) | (Pass.serial_number == pass_id))
        pass_ = session.scalars(stmt).first()
        if not pass_:
            console.print(f"[red]Pass '{pass_id}' not found[/red]")
            return False

        state = PassState.model_validate(pass_.current_state or {})

        table = Table(title="Pass Details", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("ID", pass_.id)
        table.add_row("Serial", pass_.serial_number)
        table.add_row("Campaign", pass_.campaign_id)
        table.add_row("Customer Name", state.customer_name or "N/A")
        table.add_row("Stamps", "N/A" if state.stamps is None else str(state.stamps))
        table.add_row("Points", "N/A" if state.points is None else str(state.points))
        table.add_row("Last scan", pass_.last_scanned_at.isoformat() if pass_.last_scanned_at else "never")
        console.print(table)
    return True


def main():
    parser = argparse.ArgumentParser(description="Inspect a pass by id or serial number")
    parser.add_argument("pass_id", help="Pass id or serial number")
    parser.add_argument("--env-file", default=".env.local", help="Env file with DATABASE_URL (default: .env.local)")
    args = parser.parse_args()

    get_engine(load_env_file_settings(args.env_file))
    if not inspect_pass(args.pass_id):
        sys.exit(1)


if __name__ == "__main__":
    main()
