"""Client business management for operators."""

import logging

from flask import Blueprint, flash, jsonify, redirect, render_template, url_for
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from src.admin.utils import log_admin_action, require_auth
from src.core.database.database_session import get_db_session
from src.core.database.models import Client

logger = logging.getLogger(__name__)

clients_bp = Blueprint("clients", __name__)

DELETE_FAILED = "Failed to delete client"


def _list_clients():
    stmt = select(Client).options(selectinload(Client.campaigns)).order_by(Client.created_at.desc())
    with get_db_session() as db_session:
        return [c.to_dict(include_campaigns=True) for c in db_session.scalars(stmt).all()]


def _delete_client(client_id):
    """Delete one client row; campaigns, passes, requests and routes go with it
    through ON DELETE CASCADE.

    Returns:
        The deleted client's name, or None if there was no such client.
    """
    with get_db_session() as db_session:
        client = db_session.get(Client, client_id)
        if not client:
            return None
        name = client.name
        db_session.delete(client)
        db_session.commit()
    logger.info(f"Deleted client {client_id} ({name})")
    return name


@clients_bp.route("/api/admin/clients", methods=["GET"])
@require_auth(api_mode=True)
def list_clients_api():
    try:
        return jsonify({"clients": _list_clients()})
    except SQLAlchemyError as e:
        logger.error(f"Error listing clients: {e}", exc_info=True)
        return jsonify({"error": "Failed to list clients"}), 500


@clients_bp.route("/api/admin/clients/<client_id>", methods=["DELETE"])
@require_auth(api_mode=True)
@log_admin_action("delete_client")
def delete_client_api(client_id):
    try:
        name = _delete_client(client_id)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting client {client_id}: {e}", exc_info=True)
        return jsonify({"success": False, "error": DELETE_FAILED}), 500

    if name is None:
        return jsonify({"success": False, "error": "Client not found"}), 404
    return jsonify({"success": True})


@clients_bp.route("/admin/clients")
@require_auth()
def list_clients_page():
    try:
        clients = _list_clients()
    except SQLAlchemyError as e:
        logger.error(f"Error listing clients: {e}", exc_info=True)
        flash("Could not load clients", "error")
        clients = []
    return render_template("clients.html", clients=clients)


@clients_bp.route("/admin/clients/<client_id>/delete", methods=["POST"])
@require_auth()
@log_admin_action("delete_client")
def delete_client_form(client_id):
    try:
        name = _delete_client(client_id)
    except SQLAlchemyError as e:
        logger.error(f"Error deleting client {client_id}: {e}", exc_info=True)
        flash(DELETE_FAILED, "error")
        return redirect(url_for("clients.list_clients_page"))

    if name is None:
        flash("Client not found", "error")
    else:
        flash(f"Client {name} deleted", "success")
    return redirect(url_for("clients.list_clients_page"))
