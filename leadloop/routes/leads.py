"""Leads routes - public website form intake and per-client listing"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pymongo.errors import PyMongoError
import logging

from leadloop.core.auth import get_current_user
from leadloop.core.config import PUBLIC_RATE_LIMIT
from leadloop.core.database import get_db
from leadloop.core.security import limiter
from leadloop.core.utils import serialize_doc, serialize_docs
from leadloop.models import Lead, LeadCreate, LeadSource
from leadloop.services import notifications
from leadloop.services.tenants import require_client, require_client_access
from leadloop.services.twilio_service import get_sms_service

router = APIRouter(prefix="/leads", tags=["leads"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_leads(
    client_id: str = Query(..., alias="clientId"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List leads for a client, newest first"""
    await require_client_access(db, client_id, current_user)
    leads = await db.leads.find({"client_id": client_id}, {"_id": 0}).sort("created_at", -1).to_list(1000)
    return {"ok": True, "leads": serialize_docs(leads)}


@router.post("", status_code=201)
@limiter.limit(PUBLIC_RATE_LIMIT)
async def create_lead(
    request: Request,
    data: LeadCreate,
    db=Depends(get_db),
    sms=Depends(get_sms_service),
):
    """
    Public endpoint for website form submissions.

    The lead is stored first; the SMS auto-reply is attempted afterwards and
    its failure never fails the request.
    """
    client = await require_client(db, data.client_id)

    lead = Lead(
        client_id=client["id"],
        name=data.name,
        phone=data.phone,
        email=data.email,
        message=data.message,
        source=data.source or LeadSource.WEBSITE_FORM.value,
    )
    lead_dict = lead.model_dump(mode='json')

    try:
        await db.leads.insert_one(lead_dict)
    except PyMongoError as exc:
        logger.error(f"Error inserting lead for client {client['id']}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to create lead")

    logger.info(f"Created lead {lead.id} for client {client['id']} ({lead.source})")

    reply = notifications.plan_lead_reply(client, lead_dict)
    sms_sent = await notifications.deliver_sms(sms, reply)

    return {"ok": True, "lead": serialize_doc(lead_dict), "sms_sent": sms_sent}
