"""Manual review request - text a customer the client's public review link"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from leadloop.core.auth import get_current_user
from leadloop.core.database import get_db
from leadloop.models import ReviewRequestCreate
from leadloop.services import notifications
from leadloop.services.counters import record_review_request
from leadloop.services.tenants import require_client_access
from leadloop.services.twilio_service import get_sms_service

router = APIRouter(tags=["reviews"])
logger = logging.getLogger(__name__)


@router.post("/review-request")
async def send_review_request(
    data: ReviewRequestCreate,
    db=Depends(get_db),
    sms=Depends(get_sms_service),
    current_user: dict = Depends(get_current_user),
):
    if not data.phone.strip():
        raise HTTPException(status_code=400, detail="clientId and phone are required")

    client = await require_client_access(db, data.client_id, current_user)

    if not client.get("google_review_link"):
        raise HTTPException(
            status_code=400,
            detail="No Google review link configured for this client. Please add one in Review Requests settings.",
        )

    message = notifications.plan_review_request(client, data.name, data.phone)
    sent = await notifications.deliver_sms(sms, message)
    if not sent:
        raise HTTPException(status_code=502, detail="Failed to send review request SMS")

    await record_review_request(db, client["id"], phone=data.phone)
    logger.info(f"Review request sent for client {client['id']} by {current_user['id']}")
    return {"ok": True, "sent": True}
