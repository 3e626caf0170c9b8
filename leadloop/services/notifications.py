"""
Notification policy: decides, per inbound event, whether to message someone,
over which channel, and with what content.

Planning functions are pure: they take the client document plus the event
payload and return an outbound message model, or None when nothing should be
sent. Delivery helpers hand a planned message to the SMS/email collaborator
and never raise; a failed send is logged and is the final outcome.

Events and their triggers:
    new lead            lead has a phone number            -> SMS to lead
    missed call         dial status no-answer/busy/failed  -> SMS to caller
    review submitted    rating <= 4 and owner email set     -> email to owner
                        rating >= 5                         -> public review link surfaced
    review requested    client has a review link           -> SMS to customer
    customer created    auto-review on and review link set -> SMS to customer
"""
import html
import logging
from typing import Optional

from pydantic import BaseModel

from leadloop.core.utils import normalize_phone
from leadloop.models import NotificationEvent, MISSED_CALL_STATUSES
from leadloop.services import templates

logger = logging.getLogger(__name__)

# Rating thresholds: at or below goes to the owner privately, at or above asks for a public review
PRIVATE_FEEDBACK_MAX_RATING = 4
PUBLIC_REVIEW_MIN_RATING = 5


class OutboundSms(BaseModel):
    event: NotificationEvent
    to_phone: str
    from_phone: Optional[str] = None  # None -> system-wide sender
    body: str


class OutboundEmail(BaseModel):
    event: NotificationEvent
    to_email: str
    subject: str
    html: str


class ReviewRouting(BaseModel):
    public_review_link: Optional[str] = None
    owner_email: Optional[OutboundEmail] = None


def _business_name(client: dict, fallback: str) -> str:
    return client.get("business_name") or fallback


def _sender(client: dict) -> Optional[str]:
    return client.get("twilio_number") or None


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

def plan_lead_reply(client: dict, lead: dict) -> Optional[OutboundSms]:
    """Auto-reply to a new website lead"""
    phone = (lead.get("phone") or "").strip()
    if not phone:
        return None

    booking_link = client.get("booking_link") or ""
    default = (
        templates.DEFAULT_LEAD_REPLY_WITH_BOOKING if booking_link
        else templates.DEFAULT_LEAD_REPLY
    )
    template = templates.choose_template(client.get("custom_sms_template"), default)
    body = templates.render(template, {
        "name": lead.get("name") or "",
        "business_name": _business_name(client, "our team"),
        "booking_link": booking_link,
        "review_link": client.get("google_review_link") or "",
    })
    return OutboundSms(
        event=NotificationEvent.NEW_LEAD,
        to_phone=normalize_phone(phone),
        from_phone=_sender(client),
        body=body,
    )


def is_missed_call(call_status: Optional[str]) -> bool:
    return bool(call_status) and call_status.strip().lower() in MISSED_CALL_STATUSES


def plan_missed_call_reply(client: dict, caller_phone: Optional[str],
                           call_status: Optional[str]) -> Optional[OutboundSms]:
    """Text back a caller whose forwarded call was not answered"""
    if not is_missed_call(call_status):
        return None
    caller = (caller_phone or "").strip()
    if not caller:
        return None

    booking_link = client.get("booking_link") or ""
    default = (
        templates.DEFAULT_MISSED_CALL_WITH_BOOKING if booking_link
        else templates.DEFAULT_MISSED_CALL
    )
    template = templates.choose_template(client.get("custom_sms_template"), default)
    body = templates.render(template, {
        "name": "",
        "business_name": _business_name(client, "our team"),
        "booking_link": booking_link,
        "review_link": client.get("google_review_link") or "",
    })
    return OutboundSms(
        event=NotificationEvent.MISSED_CALL,
        to_phone=normalize_phone(caller),
        from_phone=_sender(client),
        body=body,
    )


def _owner_feedback_email(client: dict, review: dict) -> OutboundEmail:
    business = _business_name(client, "your business")
    rating = review.get("rating")
    name = review.get("name") or "Anonymous"
    comments = review.get("comments") or ""
    body = f"""
      <h2>New private feedback for {html.escape(business)}</h2>
      <p><strong>Rating:</strong> {html.escape(str(rating))} / 5</p>
      <p><strong>Name:</strong> {html.escape(name)}</p>
      <p><strong>Comments:</strong></p>
      <p>{html.escape(comments).replace(chr(10), '<br>') or '<em>No comments left.</em>'}</p>
      <hr>
      <p><small>This rating was kept private and was not sent to your public review page.</small></p>
    """
    return OutboundEmail(
        event=NotificationEvent.REVIEW_SUBMITTED,
        to_email=client["owner_email"],
        subject=f"New {rating}-star feedback for {business}",
        html=body,
    )


def route_review(client: dict, review: dict) -> ReviewRouting:
    """High ratings get the public review link, low ratings go privately to the owner"""
    rating = review.get("rating")
    if rating is None:
        return ReviewRouting()

    if rating >= PUBLIC_REVIEW_MIN_RATING:
        return ReviewRouting(public_review_link=client.get("google_review_link") or None)

    if rating <= PRIVATE_FEEDBACK_MAX_RATING and client.get("owner_email"):
        return ReviewRouting(owner_email=_owner_feedback_email(client, review))

    return ReviewRouting()


def plan_review_request(client: dict, name: Optional[str], phone: Optional[str],
                        event: NotificationEvent = NotificationEvent.REVIEW_REQUESTED) -> Optional[OutboundSms]:
    """Ask a customer for a public review; needs a review link and a phone"""
    review_link = client.get("google_review_link")
    to_phone = (phone or "").strip()
    if not review_link or not to_phone:
        return None

    template = templates.choose_template(
        client.get("review_sms_template"), templates.DEFAULT_REVIEW_REQUEST
    )
    body = templates.render(template, {
        "name": name or "there",
        "business_name": _business_name(client, "our business"),
        "booking_link": client.get("booking_link") or "",
        "review_link": review_link,
    })
    return OutboundSms(
        event=event,
        to_phone=normalize_phone(to_phone),
        from_phone=_sender(client),
        body=body,
    )


def plan_auto_review(client: dict, contact: dict) -> Optional[OutboundSms]:
    """Review request sent as soon as a new customer contact is created"""
    if not client.get("auto_review_enabled"):
        return None
    return plan_review_request(
        client, contact.get("name"), contact.get("phone"),
        event=NotificationEvent.CUSTOMER_CREATED,
    )


# ---------------------------------------------------------------------------
# Delivery (best effort, no retries)
# ---------------------------------------------------------------------------

async def deliver_sms(sms_service, message: Optional[OutboundSms]) -> bool:
    if message is None:
        return False
    try:
        result = await sms_service.send_sms(
            to_phone=message.to_phone,
            body=message.body,
            from_phone=message.from_phone,
        )
    except Exception as exc:
        logger.error(f"Error sending {message.event.value} SMS to {message.to_phone}: {exc}")
        return False

    if not result or not result.get("success"):
        error = result.get("error") if result else "no result"
        logger.error(f"{message.event.value} SMS to {message.to_phone} not sent: {error}")
        return False
    return True


async def deliver_email(email_service, message: Optional[OutboundEmail]) -> bool:
    if message is None:
        return False
    try:
        result = await email_service.send_email(
            to_email=message.to_email,
            subject=message.subject,
            html=message.html,
        )
    except Exception as exc:
        logger.error(f"Error sending {message.event.value} email to {message.to_email}: {exc}")
        return False

    if not result or not result.get("success"):
        error = result.get("error") if result else "no result"
        logger.error(f"{message.event.value} email to {message.to_email} not sent: {error}")
        return False
    return True
