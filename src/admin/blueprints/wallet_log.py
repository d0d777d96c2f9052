"""Wallet web service log endpoint.

Devices holding a pass post their error logs here. Whatever arrives is logged
and acknowledged; nothing is stored.
"""

import json
import logging

from flask import Blueprint, request

from src.core.logging_config import device_logger

logger = logging.getLogger(__name__)

wallet_log_bp = Blueprint("wallet_log", __name__)


@wallet_log_bp.route("/api/v1/log", methods=["POST"])
def device_log():
    raw = request.get_data(cache=False)
    try:
        body = json.loads(raw)
    except (ValueError, UnicodeDecodeError, RecursionError):
        # Unparseable bodies are still acknowledged
        device_logger.info("[PASS LOG] unparseable body", extra={"body_size": len(raw)})
    else:
        device_logger.info("[PASS LOG] %s", json.dumps(body, default=str), extra={"device_log": body})

    return "", 200
