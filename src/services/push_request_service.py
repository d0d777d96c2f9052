"""Push request workflow: businesses submit a message, operators decide on it.

Delivery of approved messages is handled by the wallet notification service
outside this application; here a decision is only recorded.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import joinedload, selectinload

from src.core.database.database_session import get_db_session
from src.core.database.models import Campaign, Client, PushRequest

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_SCHEDULED = "scheduled"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

EDITABLE_STATUSES = (STATUS_PENDING, STATUS_SCHEDULED)

ADMIN_LIST_LIMIT = 50
POS_LIST_LIMIT = 20

DEFAULT_REJECTION_REASON = "No reason provided"


class PushRequestError(Exception):
    """Base error carrying the HTTP status the API should answer with."""

    status_code = 400


class PushRequestNotFound(PushRequestError):
    status_code = 404

    def __init__(self, message: str = "Request not found"):
        super().__init__(message)


class CampaignNotFound(PushRequestError):
    status_code = 404

    def __init__(self, message: str = "Campaign not found"):
        super().__init__(message)


class InvalidTransition(PushRequestError):
    status_code = 400


def _serialize_with_campaign(request: PushRequest) -> dict[str, Any]:
    data = request.to_dict()
    campaign = request.campaign
    if campaign is not None:
        client = campaign.client
        data["campaign"] = {
            "id": campaign.id,
            "name": campaign.name,
            "client": {"name": client.name, "slug": client.slug} if client else None,
        }
    else:
        data["campaign"] = None
    return data


def list_push_requests(campaign_id: str | None = None) -> list[dict[str, Any]]:
    """Newest push requests with their campaign and client names."""
    stmt = (
        select(PushRequest)
        .options(joinedload(PushRequest.campaign).joinedload(Campaign.client))
        .order_by(PushRequest.created_at.desc())
        .limit(ADMIN_LIST_LIMIT)
    )
    if campaign_id:
        stmt = stmt.where(PushRequest.campaign_id == campaign_id)

    with get_db_session() as db:
        return [_serialize_with_campaign(r) for r in db.scalars(stmt).unique().all()]


def reject_push_request(request_id: str, reason: str | None = None) -> int:
    """Mark a request rejected and stamp the decision time.

    There is no status guard: an earlier decision (even an approval) is
    overwritten. Returns the number of rows updated.
    """
    stmt = (
        update(PushRequest)
        .where(PushRequest.id == request_id)
        .values(
            status=STATUS_REJECTED,
            rejection_reason=reason or DEFAULT_REJECTION_REASON,
            approved_at=datetime.now(UTC),
        )
    )
    with get_db_session() as db:
        result = db.execute(stmt)
        db.commit()

    logger.info(f"[PUSH] Request {request_id} rejected")
    return result.rowcount or 0


def approve_push_request(request_id: str) -> dict[str, Any]:
    """Approve a pending request.

    Raises:
        PushRequestNotFound: no request with that id
        InvalidTransition: request is not pending
    """
    with get_db_session() as db:
        request = db.get(PushRequest, request_id)
        if not request:
            raise PushRequestNotFound()
        if request.status != STATUS_PENDING:
            raise InvalidTransition("Request is not pending")

        request.status = STATUS_APPROVED
        request.approved_at = datetime.now(UTC)
        db.commit()
        data = request.to_dict()

    logger.info(f"[PUSH] Request {request_id} approved")
    return data


def edit_push_request(request_id: str, message: str) -> dict[str, Any]:
    """Store an operator correction of the message before it goes out.

    Raises:
        PushRequestNotFound: no request with that id
        InvalidTransition: request was already decided
    """
    with get_db_session() as db:
        request = db.get(PushRequest, request_id)
        if not request:
            raise PushRequestNotFound()
        if request.status not in EDITABLE_STATUSES:
            raise InvalidTransition("Can only edit pending or scheduled requests")

        request.edited_message = message.strip()
        request.edited_at = datetime.now(UTC)
        db.commit()
        data = request.to_dict()

    logger.info(f"[PUSH] Request {request_id} edited")
    return data


def _first_campaign_id_for_slug(db, slug: str) -> str:
    client = db.scalars(select(Client).options(selectinload(Client.campaigns)).filter_by(slug=slug)).first()
    if not client or not client.campaigns:
        raise CampaignNotFound()
    return client.campaigns[0].id


def create_push_request(slug: str, message: str, scheduled_at: datetime | None = None) -> dict[str, Any]:
    """Queue a message from a business for operator approval.

    Raises:
        CampaignNotFound: the business has no campaign
    """
    with get_db_session() as db:
        campaign_id = _first_campaign_id_for_slug(db, slug)
        request = PushRequest(
            campaign_id=campaign_id,
            message=message.strip(),
            scheduled_at=scheduled_at,
            status=STATUS_PENDING,
        )
        db.add(request)
        db.commit()
        data = request.to_dict()

    logger.info(f"[PUSH REQUEST] New request from {slug}: {message[:50]!r}")
    return data


def list_campaign_push_requests(campaign_id: str | None = None, slug: str | None = None) -> list[dict[str, Any]]:
    """Recent requests of one campaign, given directly or through the business slug."""
    with get_db_session() as db:
        if slug and not campaign_id:
            campaign_id = _first_campaign_id_for_slug(db, slug)
        elif slug:
            owned = db.scalars(
                select(Campaign.id).join(Client).where(Campaign.id == campaign_id, Client.slug == slug)
            ).first()
            if not owned:
                raise CampaignNotFound()

        stmt = (
            select(PushRequest)
            .where(PushRequest.campaign_id == campaign_id)
            .order_by(PushRequest.created_at.desc())
            .limit(POS_LIST_LIMIT)
        )
        return [r.to_dict() for r in db.scalars(stmt).all()]
