"""Admin action logging decorator.

Writes one structured record per admin mutation to the pass_admin.audit logger.

DECORATOR ORDER CONVENTION:
    @route_decorator
    @require_auth()           # First: Check authorization
    @log_admin_action()       # Second: Log authorized actions only
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import Response, request, session

from src.core.logging_config import audit_logger

logger = logging.getLogger(__name__)

# PINs are credentials here as well
_SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "passwd",
        "pwd",
        "pin",
        "admin_pin",
        "staff_pin",
        "secret",
        "token",
        "key",
        "api_key",
        "credential",
        "authorization",
    }
)

_SENSITIVE_SUFFIXES = ("_secret", "_token", "_key", "_password", "_pin")


def _is_sensitive_field(field_name: str) -> bool:
    lower_field = field_name.lower()
    return lower_field in _SENSITIVE_PATTERNS or lower_field.endswith(_SENSITIVE_SUFFIXES)


def _sanitize_value(value: Any) -> str:
    """Stringify and truncate to 100 characters."""
    return str(value)[:100]


def _extract_safe_request_data() -> dict[str, str]:
    """Extract non-sensitive fields from the form or JSON body."""
    safe_fields: dict[str, str] = {}

    if request.form:
        items = request.form.items()
    else:
        json_data = request.get_json(silent=True)
        items = json_data.items() if isinstance(json_data, dict) else []

    for key, value in items:
        if not _is_sensitive_field(key):
            safe_fields[key] = _sanitize_value(value)

    return safe_fields


def _status_code(result: Any) -> int:
    if isinstance(result, Response):
        return result.status_code
    if isinstance(result, tuple) and len(result) > 1 and isinstance(result[1], int):
        return result[1]
    return 200


def log_admin_action(
    operation_name: str,
    extract_details: Callable[..., dict[str, Any]] | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to log admin actions.

    Args:
        operation_name: Name of the operation (e.g., "reject_push_request")
        extract_details: Optional function to extract details from the result
                        Signature: extract_details(result, **kwargs) -> dict

    Usage:
        @log_admin_action("delete_client", extract_details=lambda r, **kw: {"client_id": kw.get("client_id")})
        def delete_client(client_id):
            ...
    """

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def decorated_function(*args: Any, **kwargs: Any) -> Any:
            user_email = session.get("user") or "unknown"

            result: Any = None
            error_message: str | None = None

            try:
                result = f(*args, **kwargs)
                return result
            except Exception as e:
                error_message = str(e)
                raise
            finally:
                try:
                    details: dict[str, Any] = {
                        "user": user_email,
                        "action": operation_name,
                        "method": request.method,
                        "path": request.path,
                        "route_args": {k: _sanitize_value(v) for k, v in kwargs.items()},
                    }

                    if extract_details and callable(extract_details):
                        try:
                            extracted = extract_details(result, **kwargs)
                            if isinstance(extracted, dict):
                                details.update(extracted)
                        except Exception as e:
                            logger.warning(f"Failed to extract details for {operation_name}: {e}")

                    if request.method in ("POST", "PUT", "DELETE"):
                        safe_fields = _extract_safe_request_data()
                        if safe_fields:
                            details["request_data"] = safe_fields

                    success = error_message is None and _status_code(result) < 400
                    details["success"] = success
                    if error_message:
                        details["error"] = error_message

                    if success:
                        audit_logger.info(f"admin action {operation_name}", extra={"audit": details})
                    else:
                        audit_logger.warning(f"admin action {operation_name} failed", extra={"audit": details})
                except Exception as e:
                    # Audit logging never fails the request
                    logger.warning(f"Failed to write admin audit log for {operation_name}: {e}")

        return decorated_function

    return decorator
