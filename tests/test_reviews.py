from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from pymongo.errors import PyMongoError

from leadloop.models import ReviewCreate
from leadloop.routes.reviews import list_reviews, submit_review


async def test_five_star_returns_public_link(db, email, acme, http_request):
    db.clients.find_one = AsyncMock(return_value=acme)
    data = ReviewCreate(clientId="acme", name="Sam", rating=5, comments="Great")

    result = await submit_review(request=http_request, data=data, db=db, email=email)

    assert result["ok"] is True
    assert result["googleReviewLink"] == "https://g.page/acme/review"
    assert result["owner_notified"] is False
    assert result["review"]["rating"] == 5
    email.send_email.assert_not_awaited()


async def test_low_rating_emails_owner_privately(db, email, acme, http_request):
    db.clients.find_one = AsyncMock(return_value=acme)
    data = ReviewCreate(clientId="acme", name="Sam", rating=4, comments="Slow")

    result = await submit_review(request=http_request, data=data, db=db, email=email)

    assert result["googleReviewLink"] is None
    assert result["owner_notified"] is True
    kwargs = email.send_email.call_args.kwargs
    assert kwargs["to_email"] == "owner@acme.example"
    assert "Slow" in kwargs["html"]


async def test_email_failure_still_saves_review(db, email, acme, http_request):
    db.clients.find_one = AsyncMock(return_value=acme)
    email.send_email = AsyncMock(side_effect=RuntimeError("resend down"))
    data = ReviewCreate(clientId="acme", rating=1)

    result = await submit_review(request=http_request, data=data, db=db, email=email)

    assert result["ok"] is True
    assert result["owner_notified"] is False
    db.reviews.insert_one.assert_awaited_once()


async def test_unknown_client_rejected(db, email, http_request):
    data = ReviewCreate(clientId="nope", rating=5)

    with pytest.raises(HTTPException) as exc_info:
        await submit_review(request=http_request, data=data, db=db, email=email)

    assert exc_info.value.status_code == 400


async def test_storage_failure_returns_500(db, email, acme, http_request):
    db.clients.find_one = AsyncMock(return_value=acme)
    db.reviews.insert_one = AsyncMock(side_effect=PyMongoError("write failed"))
    data = ReviewCreate(clientId="acme", rating=2)

    with pytest.raises(HTTPException) as exc_info:
        await submit_review(request=http_request, data=data, db=db, email=email)

    assert exc_info.value.status_code == 500
    email.send_email.assert_not_awaited()


async def test_list_reviews(db, acme, admin_user):
    db.clients.find_one = AsyncMock(return_value=acme)
    db.reviews.find.return_value.to_list = AsyncMock(return_value=[{"id": "r-1", "rating": 5}])

    result = await list_reviews(client_id="acme", db=db, current_user=admin_user)

    assert result["reviews"] == [{"id": "r-1", "rating": 5}]
