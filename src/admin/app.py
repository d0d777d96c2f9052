"""Flask application factory for the pass admin UI."""

import logging
import secrets
from datetime import datetime, timedelta

from flask import Flask, request
from werkzeug.middleware.proxy_fix import ProxyFix as WerkzeugProxyFix

from src.admin.blueprints.auth import auth_bp
from src.admin.blueprints.automations import automations_bp
from src.admin.blueprints.campaigns import campaigns_bp
from src.admin.blueprints.client_auth import client_auth_bp
from src.admin.blueprints.clients import clients_bp
from src.admin.blueprints.core import core_bp
from src.admin.blueprints.dynamic_routes import dynamic_routes_bp
from src.admin.blueprints.pos import pos_bp
from src.admin.blueprints.public import public_bp
from src.admin.blueprints.push_requests import push_requests_bp
from src.admin.blueprints.wallet_log import wallet_log_bp
from src.admin.middleware import SubdomainRouter
from src.core.config import get_app_config
from src.core.logging_config import setup_structured_logging

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Create and configure the Flask application."""
    setup_structured_logging()
    app_config = get_app_config()

    app = Flask(__name__, template_folder="../../templates", static_folder="../../static")

    # Configuration
    if app_config.flask_secret_key:
        app.secret_key = app_config.flask_secret_key
    else:
        if app_config.production:
            logger.warning("FLASK_SECRET_KEY is not set, operator sessions will not survive a restart")
        app.secret_key = secrets.token_hex(32)
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=12)

    if app_config.production:
        app.config["SESSION_COOKIE_SECURE"] = True
        app.config["SESSION_COOKIE_HTTPONLY"] = True
        app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
        app.config["SESSION_COOKIE_PATH"] = "/"
        app.config["PREFERRED_URL_SCHEME"] = "https"
        # Share cookies across admin./app./start. subdomains
        if app_config.session_cookie_domain:
            app.config["SESSION_COOKIE_DOMAIN"] = app_config.session_cookie_domain
    else:
        app.config["SESSION_COOKIE_SECURE"] = False  # Allow HTTP in dev
        app.config["SESSION_COOKIE_HTTPONLY"] = True
        app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
        app.config["SESSION_COOKIE_PATH"] = "/"

    app.config["BASE_DOMAIN"] = app_config.base_domain

    # Add custom Jinja2 filters
    def datetime_filter(value, fmt="%d.%m.%Y %H:%M"):
        """Format ISO timestamps coming from to_dict() serializers."""
        if not value:
            return ""
        if isinstance(value, str):
            try:
                value = datetime.fromisoformat(value)
            except ValueError:
                return value
        return value.strftime(fmt)

    app.jinja_env.filters["datetime"] = datetime_filter

    # Apply any additional config
    if config:
        app.config.update(config)

    # Apply proxy fixes for production
    if app_config.production:
        # WerkzeugProxyFix processes X-Forwarded headers and sets wsgi.url_scheme
        app.wsgi_app = WerkzeugProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=0)

    # Runs before ProxyFix so it sees the client-facing host
    app.wsgi_app = SubdomainRouter(app.wsgi_app, base_domain=app.config.get("BASE_DOMAIN"))

    @app.after_request
    def no_store_for_authenticated_pages(response):
        """Keep PIN-protected and admin pages out of shared caches."""
        if request.path.startswith(("/admin", "/client/", "/pos/", "/api/")):
            response.headers.setdefault("Cache-Control", "no-store")
        return response

    # Register blueprints
    app.register_blueprint(public_bp)  # Public routes (no auth required)
    app.register_blueprint(core_bp)  # Core routes (/, /admin, /health)
    app.register_blueprint(auth_bp)  # Operator login at /admin/login
    app.register_blueprint(client_auth_bp)  # PIN login at /login/<slug>
    app.register_blueprint(dynamic_routes_bp)  # /d/<code> and /api/dynamic-routes
    app.register_blueprint(clients_bp)
    app.register_blueprint(campaigns_bp)  # /api/campaign/<id>
    app.register_blueprint(push_requests_bp)
    app.register_blueprint(pos_bp)  # /client/<slug>, /pos/<slug>, /api/pos
    app.register_blueprint(automations_bp)
    app.register_blueprint(wallet_log_bp)  # Device log endpoint /api/v1/log

    logger.info("Admin UI initialized")
    return app
