import os

os.environ.setdefault("MONGO_URL", "mongodb://localhost:27017")
os.environ.setdefault("DB_NAME", "leadloop_test")
os.environ.setdefault("JWT_SECRET", "test-secret-test-secret")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TWILIO_FROM_NUMBER", "+15550000000")

from unittest.mock import AsyncMock, MagicMock

import pytest

COLLECTIONS = (
    "clients", "leads", "reviews", "profiles", "users",
    "client_users", "customer_contacts", "audit_logs",
)


def make_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.insert_many = AsyncMock()
    collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1, modified_count=1))
    collection.delete_one = AsyncMock()
    collection.delete_many = AsyncMock()

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


@pytest.fixture
def db():
    database = MagicMock()
    for name in COLLECTIONS:
        setattr(database, name, make_collection())
    return database


@pytest.fixture
def sms():
    service = MagicMock()
    service.send_sms = AsyncMock(return_value={
        "success": True, "provider_message_id": "SM123", "error": None,
    })
    return service


@pytest.fixture
def email():
    service = MagicMock()
    service.send_email = AsyncMock(return_value={
        "success": True, "provider_message_id": "em_123", "error": None,
    })
    return service


@pytest.fixture
def admin_user():
    return {"id": "admin-1", "email": "admin@example.com", "role": "admin"}


@pytest.fixture
def client_user():
    return {"id": "user-1", "email": "owner@acme.example", "role": "client"}


@pytest.fixture
def acme():
    return {
        "id": "acme",
        "business_name": "Acme Plumbing",
        "booking_link": "https://acme.example/book",
        "google_review_link": "https://g.page/acme/review",
        "owner_email": "owner@acme.example",
        "twilio_number": "+14165550000",
        "forwarding_phone": "+14165559999",
        "custom_sms_template": None,
        "review_sms_template": None,
        "auto_review_enabled": False,
    }


@pytest.fixture
def http_request():
    request = MagicMock()
    request.client = None
    return request
