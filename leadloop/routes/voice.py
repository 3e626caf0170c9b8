"""
Twilio voice webhooks.

/twilio/voice answers an inbound call on a client's Twilio number by
forwarding it to the client's own phone. When the forwarded leg ends Twilio
posts the dial outcome to /twilio/call-status; unanswered, busy or failed
calls are saved as leads and the caller gets a text back.

The caller here is Twilio, not a browser, so these endpoints never return
HTTP errors: an unknown number hangs up, and status callbacks always 200.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from leadloop.core import config
from leadloop.core.database import get_db
from leadloop.models import Lead, LeadSource
from leadloop.services import notifications
from leadloop.services.tenants import find_client_by_phone
from leadloop.services.twilio_service import get_sms_service, dial_twiml, hangup_twiml

router = APIRouter(prefix="/twilio", tags=["twilio"])
logger = logging.getLogger(__name__)

CALL_STATUS_PATH = "/api/twilio/call-status"


def _twiml(content: str) -> Response:
    return Response(content=content, media_type="text/xml")


def _call_status_url(request: Request) -> str:
    base_url = config.PUBLIC_BASE_URL or str(request.base_url).rstrip("/")
    return f"{base_url}{CALL_STATUS_PATH}"


@router.post("/voice")
async def twilio_voice(request: Request, db=Depends(get_db)):
    """Forward an inbound call to the client's forwarding phone"""
    form_data = await request.form()
    from_phone = (form_data.get("From") or "").strip()
    to_phone = (form_data.get("To") or "").strip()

    logger.info(f"Incoming call from {from_phone} to {to_phone}")

    client = await find_client_by_phone(db, to_phone)
    if not client:
        logger.error(f"No client found for Twilio number: {to_phone}")
        return _twiml(hangup_twiml())

    forwarding_phone = client.get("forwarding_phone")
    if not forwarding_phone:
        logger.error(f"No forwarding phone set for client: {client['id']}")
        return _twiml(hangup_twiml())

    return _twiml(dial_twiml(forwarding_phone, _call_status_url(request)))


@router.post("/call-status")
async def twilio_call_status(request: Request, db=Depends(get_db), sms=Depends(get_sms_service)):
    """Dial action callback: turn missed calls into leads and text the caller back"""
    form_data = await request.form()
    dial_status = form_data.get("DialCallStatus") or form_data.get("CallStatus")
    from_phone = form_data.get("From") or form_data.get("Caller")
    to_phone = form_data.get("To")

    logger.info(f"Call status callback: status={dial_status} from={from_phone} to={to_phone}")

    if not notifications.is_missed_call(dial_status):
        return PlainTextResponse("No action needed")

    client = await find_client_by_phone(db, to_phone)
    if not client:
        logger.error(f"No client found for Twilio number (missed call): {to_phone}")
        return PlainTextResponse("Client not found")

    lead = Lead(
        client_id=client["id"],
        phone=from_phone,
        message="Missed call",
        source=LeadSource.MISSED_CALL.value,
    )
    try:
        await db.leads.insert_one(lead.model_dump(mode='json'))
        logger.info(f"Saved missed-call lead {lead.id} for client {client['id']}")
    except Exception as exc:
        logger.error(f"Error saving missed-call lead: {exc}")

    reply = notifications.plan_missed_call_reply(client, from_phone, dial_status)
    await notifications.deliver_sms(sms, reply)

    return PlainTextResponse("OK")
