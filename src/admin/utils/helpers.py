"""Utility functions shared across admin UI modules."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from flask import g, jsonify, redirect, request, session, url_for
from pydantic import BaseModel, ValidationError

from src.services.session_service import resolve_session, session_cookie_name

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_json_body(model: type[ModelT]) -> ModelT:
    """Validate the JSON request body against a pydantic model.

    A missing or unparseable body is validated as an empty object, so required
    fields surface as a ValidationError rather than a 500.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return model.model_validate(data)


def validation_error_message(error: ValidationError) -> str:
    """First validation error as a short "field: message" string."""
    errors = error.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def is_operator() -> bool:
    return bool(session.get("user"))


def require_auth(api_mode=False):
    """Decorator to require an operator login for /admin routes."""

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not is_operator():
                logger.info(f"require_auth: no operator session for {request.path}")
                if api_mode:
                    return jsonify({"error": "Authentication required"}), 401
                # Store the original URL to redirect back after login
                return redirect(url_for("auth.login", next=request.url))

            g.user = session["user"]
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def require_client_role(
    *roles: str,
    api_mode: bool = False,
    slug_from: Callable[[], str | None] | None = None,
):
    """Decorator to require a PIN session of the given roles for a business.

    The business slug comes from the ``slug`` route argument, or from
    ``slug_from()`` for API routes that carry it in the body or query string.
    A logged-in operator passes without a PIN session.

    On success ``g.client_slug`` and ``g.client_role`` are set.
    """

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            slug = kwargs.get("slug")
            if slug is None and slug_from is not None:
                slug = slug_from()

            if is_operator():
                g.client_slug = slug
                g.client_role = "operator"
                return f(*args, **kwargs)

            role = None
            if slug:
                role = resolve_session(slug, request.cookies.get(session_cookie_name(slug)))

            if role is None or role not in roles:
                logger.info(f"require_client_role: denied {request.path} slug={slug} role={role}")
                if api_mode or not slug:
                    return jsonify({"error": "Unauthorized"}), 401
                return redirect(url_for("client_auth.login", slug=slug))

            g.client_slug = slug
            g.client_role = role
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def slug_from_json_or_args() -> str | None:
    """Business slug from the JSON body, falling back to the query string."""
    data = request.get_json(silent=True)
    if isinstance(data, dict) and data.get("slug"):
        return str(data["slug"])
    return request.args.get("slug") or None


def safe_next_url(target: Any, default: str) -> str:
    """Only allow local redirect targets after login."""
    if isinstance(target, str) and target.startswith("/") and not target.startswith("//"):
        return target
    return default
