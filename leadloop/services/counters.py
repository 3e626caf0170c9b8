"""Review-request counters on customer contacts.

Advisory telemetry only: failures are logged and swallowed, and concurrent
requests may race.
"""
import logging
from typing import Optional

from leadloop.core.utils import phone_variants, utc_now_iso

logger = logging.getLogger(__name__)


async def record_review_request(db, client_id: str, phone: Optional[str] = None,
                                contact_id: Optional[str] = None) -> bool:
    """Bump review_request_count and last_review_request_at on the matching contact"""
    try:
        if contact_id:
            target_id = contact_id
        else:
            variants = phone_variants(phone)
            if not variants:
                return False
            contacts = await (
                db.customer_contacts.find(
                    {"client_id": client_id, "phone": {"$in": variants}}, {"_id": 0}
                )
                .sort("created_at", -1)
                .limit(1)
                .to_list(1)
            )
            if not contacts:
                return False
            target_id = contacts[0]["id"]

        result = await db.customer_contacts.update_one(
            {"id": target_id},
            {
                "$set": {"last_review_request_at": utc_now_iso()},
                "$inc": {"review_request_count": 1},
            },
        )
        return result.modified_count > 0
    except Exception as exc:
        logger.error(f"Error updating review_request_count for client {client_id}: {exc}")
        return False
