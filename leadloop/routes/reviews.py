"""Review routes - public review submission with rating-based routing"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pymongo.errors import PyMongoError
import logging

from leadloop.core.auth import get_current_user
from leadloop.core.config import PUBLIC_RATE_LIMIT
from leadloop.core.database import get_db
from leadloop.core.security import limiter
from leadloop.core.utils import serialize_doc, serialize_docs
from leadloop.models import Review, ReviewCreate
from leadloop.services import notifications
from leadloop.services.email_service import get_email_service
from leadloop.services.tenants import require_client, require_client_access

router = APIRouter(prefix="/reviews", tags=["reviews"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_reviews(
    client_id: str = Query(..., alias="clientId"),
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """List reviews for a client, newest first"""
    await require_client_access(db, client_id, current_user)
    reviews = await db.reviews.find({"client_id": client_id}, {"_id": 0}).sort("created_at", -1).to_list(1000)
    return {"ok": True, "reviews": serialize_docs(reviews)}


@router.post("", status_code=201)
@limiter.limit(PUBLIC_RATE_LIMIT)
async def submit_review(
    request: Request,
    data: ReviewCreate,
    db=Depends(get_db),
    email=Depends(get_email_service),
):
    """
    Record a customer review.

    A 5-star rating returns the client's public review link for the page to
    redirect to; anything at 4 or below stays private and the owner is
    emailed the feedback.
    """
    client = await require_client(db, data.client_id)

    review = Review(
        client_id=client["id"],
        name=data.name,
        rating=data.rating,
        comments=data.comments,
    )
    review_dict = review.model_dump(mode='json')

    try:
        await db.reviews.insert_one(review_dict)
    except PyMongoError as exc:
        logger.error(f"Error inserting review for client {client['id']}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to save review")

    routing = notifications.route_review(client, review_dict)
    owner_notified = await notifications.deliver_email(email, routing.owner_email)

    return {
        "ok": True,
        "review": serialize_doc(review_dict),
        "googleReviewLink": routing.public_review_link,
        "owner_notified": owner_notified,
    }
