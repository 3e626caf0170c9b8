"""
LeadLoop Data Models - Pydantic models for all entities
"""
from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum
import uuid


def generate_id():
    return str(uuid.uuid4())


def utc_now():
    return datetime.now(timezone.utc)


# ============= ENUMS =============

class UserRole(str, Enum):
    ADMIN = "admin"
    CLIENT = "client"
    USER = "user"


class LeadSource(str, Enum):
    WEBSITE_FORM = "website_form"
    MISSED_CALL = "missed_call"


class NotificationEvent(str, Enum):
    NEW_LEAD = "new_lead"
    MISSED_CALL = "missed_call"
    REVIEW_SUBMITTED = "review_submitted"
    REVIEW_REQUESTED = "review_requested"
    CUSTOMER_CREATED = "customer_created"


# Dial outcomes that count as a missed call
MISSED_CALL_STATUSES = frozenset({"no-answer", "busy", "failed"})


# ============= CLIENT (TENANT) MODELS =============

class ClientBase(BaseModel):
    business_name: str
    website_url: Optional[str] = None
    booking_link: Optional[str] = None
    google_review_link: Optional[str] = None
    owner_email: Optional[EmailStr] = None

    # Inbound Twilio number routes voice/SMS webhooks to this client
    twilio_number: Optional[str] = None
    forwarding_phone: Optional[str] = None

    # Message templates ({{name}}, {{business_name}}, {{booking_link}}, {{review_link}})
    custom_sms_template: Optional[str] = None
    review_sms_template: Optional[str] = None
    auto_review_enabled: bool = False


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    business_name: Optional[str] = None
    website_url: Optional[str] = None
    booking_link: Optional[str] = None
    google_review_link: Optional[str] = None
    owner_email: Optional[EmailStr] = None
    twilio_number: Optional[str] = None
    forwarding_phone: Optional[str] = None
    custom_sms_template: Optional[str] = None
    review_sms_template: Optional[str] = None
    auto_review_enabled: Optional[bool] = None


class Client(ClientBase):
    model_config = ConfigDict(extra="ignore")
    id: str = Field(default_factory=generate_id)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ============= LEAD MODELS =============

class LeadCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    client_id: str = Field(alias="clientId", min_length=1)
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None


class Lead(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str = Field(default_factory=generate_id)
    client_id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    source: str = LeadSource.WEBSITE_FORM.value
    created_at: datetime = Field(default_factory=utc_now)


# ============= REVIEW MODELS =============

class ReviewCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    client_id: str = Field(alias="clientId", min_length=1)
    name: Optional[str] = None
    rating: int  # 1-5 expected, not range-enforced
    comments: Optional[str] = None


class Review(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str = Field(default_factory=generate_id)
    client_id: str
    name: Optional[str] = None
    rating: int
    comments: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class ReviewRequestCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    client_id: str = Field(alias="clientId", min_length=1)
    name: Optional[str] = None
    phone: str = Field(min_length=1)


# ============= CUSTOMER CONTACT MODELS =============

class CustomerCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    client_id: str = Field(alias="clientId", min_length=1)
    name: Optional[str] = None
    phone: str = Field(min_length=1)
    email: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class CustomerContact(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str = Field(default_factory=generate_id)
    client_id: str
    name: Optional[str] = None
    phone: str
    email: Optional[str] = None
    last_review_request_at: Optional[datetime] = None
    review_request_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)


# ============= USER / PROFILE MODELS =============

class Profile(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str
    email: str
    display_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = UserRole.CLIENT
    needs_password_change: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    role: UserRole = UserRole.CLIENT
    client_id: Optional[str] = None
    display_name: Optional[str] = None
    phone: Optional[str] = None


class UserUpdate(BaseModel):
    display_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    client_ids: Optional[List[str]] = None  # replaces the whole mapping


class MoveUserRequest(BaseModel):
    client_id: str


class NeedsPasswordChangeRequest(BaseModel):
    value: bool = True


# ============= AUTH MODELS =============

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(min_length=8)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Profile
