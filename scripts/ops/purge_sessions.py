#!/usr/bin/env python3
"""Delete expired client PIN sessions."""

import argparse

from rich.console import Console

from src.core.config import load_env_file_settings
from src.core.database.database_session import get_engine
from src.services.session_service import purge_expired_sessions

console = Console()


def main():
    parser = argparse.ArgumentParser(description="Remove expired rows from client_sessions")
    parser.add_argument("--env-file", default=".env.local", help="Env file with DATABASE_URL (default: .env.local)")
    args = parser.parse_args()

    get_engine(load_env_file_settings(args.env_file))
    removed = purge_expired_sessions()
    console.print(f"[green]Removed {removed} expired session(s)[/green]")


if __name__ == "__main__":
    main()
