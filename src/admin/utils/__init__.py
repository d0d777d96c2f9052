"""Admin utilities package."""

# Export decorator
from src.admin.utils.audit_decorator import log_admin_action

# Export all helper functions
from src.admin.utils.helpers import (
    is_operator,
    parse_json_body,
    require_auth,
    require_client_role,
    safe_next_url,
    slug_from_json_or_args,
    validation_error_message,
)

__all__ = [
    # Decorator
    "log_admin_action",
    # Auth/authorization functions
    "is_operator",
    "require_auth",
    "require_client_role",
    "slug_from_json_or_args",
    "safe_next_url",
    # Request parsing
    "parse_json_body",
    "validation_error_message",
]
