from unittest.mock import AsyncMock

from leadloop.services.counters import record_review_request


async def test_bumps_most_recent_contact_for_phone(db):
    db.customer_contacts.find.return_value.to_list = AsyncMock(return_value=[{"id": "c-2"}])

    assert await record_review_request(db, "acme", phone="(416) 555-1234") is True

    query = db.customer_contacts.find.call_args.args[0]
    assert query["client_id"] == "acme"
    assert "(416) 555-1234" in query["phone"]["$in"]
    assert "+14165551234" in query["phone"]["$in"]
    db.customer_contacts.find.return_value.sort.assert_called_with("created_at", -1)

    filter_, update = db.customer_contacts.update_one.call_args.args
    assert filter_ == {"id": "c-2"}
    assert update["$inc"] == {"review_request_count": 1}
    assert "last_review_request_at" in update["$set"]


async def test_contact_id_skips_lookup(db):
    assert await record_review_request(db, "acme", contact_id="c-9") is True

    db.customer_contacts.find.assert_not_called()
    assert db.customer_contacts.update_one.call_args.args[0] == {"id": "c-9"}


async def test_no_matching_contact(db):
    assert await record_review_request(db, "acme", phone="4165551234") is False
    db.customer_contacts.update_one.assert_not_awaited()


async def test_failures_are_swallowed(db):
    db.customer_contacts.update_one = AsyncMock(side_effect=RuntimeError("db down"))

    assert await record_review_request(db, "acme", contact_id="c-1") is False
