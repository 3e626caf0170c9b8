"""
Security hardening for LeadLoop:
  - Rate limiting via slowapi on the public write endpoints
  - Audit logging (who did what to which record)
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from leadloop.core.config import RATE_LIMIT_ENABLED

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rate Limiting
# ---------------------------------------------------------------------------

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
"""
Usage in routes:
    @router.post("")
    @limiter.limit(PUBLIC_RATE_LIMIT)
    async def create_lead(request: Request, ...):
        ...

Registered on the app in server.py with slowapi's RateLimitExceeded handler.
"""


# ---------------------------------------------------------------------------
# Audit Logging
# ---------------------------------------------------------------------------

async def audit_log(
    db,
    action: str,
    resource_type: str,
    resource_id: str,
    user_id: str,
    client_id: Optional[str] = None,
    before: Optional[dict] = None,
    after: Optional[dict] = None,
    request: Optional[Request] = None,
) -> None:
    """
    Record an audit log entry for an admin write.

    Examples:
        await audit_log(db, "CREATE", "client", client_id, admin["id"], client_id, after=doc)
        await audit_log(db, "DELETE", "user", user_id, admin["id"])
    """
    ip_address = None
    if request is not None and request.client is not None:
        forwarded = request.headers.get("x-forwarded-for")
        ip_address = forwarded.split(",")[0].strip() if forwarded else request.client.host

    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action,           # CREATE / UPDATE / DELETE
        "resource_type": resource_type,
        "resource_id": resource_id,
        "user_id": user_id,
        "client_id": client_id,
        "ip_address": ip_address,
        "before": before,
        "after": after,
    }

    try:
        await db.audit_logs.insert_one(entry)
    except Exception as exc:
        # Audit logging must never break the main request
        logger.error(f"Audit log write failed: {exc}")
