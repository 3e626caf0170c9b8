"""Customer contact routes - the review-request address book"""
from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo.errors import PyMongoError
import logging

from leadloop.core.auth import get_current_user
from leadloop.core.database import get_db
from leadloop.core.utils import serialize_doc, serialize_docs
from leadloop.models import CustomerContact, CustomerCreate, CustomerUpdate
from leadloop.services import notifications
from leadloop.services.counters import record_review_request
from leadloop.services.tenants import require_client_access
from leadloop.services.twilio_service import get_sms_service

router = APIRouter(prefix="/customers", tags=["customers"])
logger = logging.getLogger(__name__)


async def _load_contact(db, customer_id: str, current_user: dict) -> dict:
    contact = await db.customer_contacts.find_one({"id": customer_id}, {"_id": 0})
    if not contact:
        raise HTTPException(status_code=404, detail="Customer not found")
    await require_client_access(db, contact["client_id"], current_user)
    return contact


@router.get("")
async def list_customers(
    client_id: str = Query(..., alias="clientId"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List customer contacts for a client, newest first"""
    await require_client_access(db, client_id, current_user)
    customers = await db.customer_contacts.find(
        {"client_id": client_id}, {"_id": 0}
    ).sort("created_at", -1).to_list(1000)
    return {"ok": True, "customers": serialize_docs(customers)}


@router.post("", status_code=201)
async def create_customer(
    data: CustomerCreate,
    db=Depends(get_db),
    sms=Depends(get_sms_service),
    current_user: dict = Depends(get_current_user),
):
    """Create a customer contact; sends the review request right away when auto-review is on"""
    if not data.phone.strip():
        raise HTTPException(status_code=400, detail="clientId and phone are required")

    client = await require_client_access(db, data.client_id, current_user)

    contact = CustomerContact(
        client_id=client["id"],
        name=data.name,
        phone=data.phone,
        email=data.email,
    )
    contact_dict = contact.model_dump(mode='json')

    try:
        await db.customer_contacts.insert_one(contact_dict)
    except PyMongoError as exc:
        logger.error(f"Error creating customer for client {client['id']}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to create customer")

    review_request_sent = False
    message = notifications.plan_auto_review(client, contact_dict)
    if message is not None:
        review_request_sent = await notifications.deliver_sms(sms, message)
        if review_request_sent:
            await record_review_request(db, client["id"], contact_id=contact.id)

    return {
        "ok": True,
        "customer": serialize_doc(contact_dict),
        "review_request_sent": review_request_sent,
    }


@router.patch("/{customer_id}")
@router.put("/{customer_id}")
async def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """Update name, phone or email on a contact"""
    updates = data.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No updatable fields provided")

    await _load_contact(db, customer_id, current_user)

    try:
        await db.customer_contacts.update_one({"id": customer_id}, {"$set": updates})
    except PyMongoError as exc:
        logger.error(f"Error updating customer {customer_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to update customer")

    customer = await db.customer_contacts.find_one({"id": customer_id}, {"_id": 0})
    return {"ok": True, "customer": serialize_doc(customer)}


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await _load_contact(db, customer_id, current_user)

    try:
        await db.customer_contacts.delete_one({"id": customer_id})
    except PyMongoError as exc:
        logger.error(f"Error deleting customer {customer_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to delete customer")

    return {"ok": True}
