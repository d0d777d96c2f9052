#!/usr/bin/env python
"""Production server entry point for the pass admin UI.

Supports two server backends:
- Waitress (production, default)
- Werkzeug (development/debugging)
"""

import logging
import os
import sys

from src.core.config import get_app_config, get_database_config

logger = logging.getLogger(__name__)


def run_waitress(app, port: int):
    """Run with Waitress WSGI server (production)."""
    from waitress import serve

    logger.info(f"Starting Admin UI with Waitress on port {port}")
    serve(app, host="0.0.0.0", port=port, threads=4)


def run_werkzeug(app, port: int, debug: bool = False):
    """Run with Werkzeug server (development)."""
    from werkzeug.serving import make_server

    logger.info(f"Starting Admin UI with Werkzeug on port {port} (debug={debug})")
    server = make_server("0.0.0.0", port, app, threaded=True)
    server.serve_forever()


def main():
    """Main entry point for the admin UI server."""
    from src.admin.app import create_app

    # Create the Flask app (also configures logging)
    app = create_app()

    if not get_database_config().url:
        logger.error("DATABASE_URL is not set")
        sys.exit(1)

    app_config = get_app_config()
    port = app_config.admin_ui_port
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    server_type = app_config.admin_server_type.lower()

    # Force production settings for security
    if not debug:
        os.environ.pop("WERKZEUG_SERVER_FD", None)
        os.environ["FLASK_DEBUG"] = "0"
        os.environ["WERKZEUG_DEBUG_PIN"] = "off"

    # Select and run the appropriate server
    if debug or server_type == "werkzeug":
        run_werkzeug(app, port, debug)
    else:  # Default to waitress
        run_waitress(app, port)


if __name__ == "__main__":
    main()
