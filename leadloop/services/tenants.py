"""Client (tenant) configuration lookup and access checks"""
import logging
from typing import Optional

from fastapi import HTTPException

from leadloop.core.auth import is_admin
from leadloop.core.utils import phone_variants

logger = logging.getLogger(__name__)


async def get_client(db, client_id: str) -> Optional[dict]:
    if not client_id:
        return None
    return await db.clients.find_one({"id": client_id}, {"_id": 0})


async def require_client(db, client_id: str) -> dict:
    """Resolve a client or fail the request as invalid input"""
    client = await get_client(db, client_id)
    if not client:
        logger.warning(f"Invalid clientId: {client_id}")
        raise HTTPException(status_code=400, detail="Invalid clientId")
    return client


async def find_client_by_phone(db, number: str) -> Optional[dict]:
    """
    Find the client that owns an inbound Twilio number.

    Twilio posts E.164 numbers, but numbers saved through the admin console
    may be spelled differently, so every plausible spelling is tried.
    """
    variants = phone_variants(number)
    if not variants:
        return None
    return await db.clients.find_one({"twilio_number": {"$in": variants}}, {"_id": 0})


async def linked_client_ids(db, user_id: str) -> list[str]:
    links = await db.client_users.find({"user_id": user_id}, {"_id": 0}).to_list(1000)
    return [link["client_id"] for link in links if link.get("client_id")]


async def require_client_access(db, client_id: str, user: dict) -> dict:
    """Resolve the client and make sure the caller may act on it"""
    client = await require_client(db, client_id)
    if is_admin(user):
        return client

    link = await db.client_users.find_one({"user_id": user["id"], "client_id": client_id})
    if not link:
        raise HTTPException(status_code=403, detail="Not linked to this client")
    return client
