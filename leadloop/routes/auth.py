"""Auth routes - login, current user, password change"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from leadloop.core.auth import (
    get_current_user, verify_password, hash_password, create_access_token,
)
from leadloop.core.database import get_db
from leadloop.core.utils import serialize_doc, utc_now_iso
from leadloop.models import LoginRequest, TokenResponse, ChangePasswordRequest, Profile
from leadloop.services.tenants import linked_client_ids

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, db=Depends(get_db)):
    """Authenticate user and return JWT token"""
    email = request.email.strip().lower()
    user = await db.users.find_one({"email": email}, {"_id": 0})

    if not user or not verify_password(request.password, user.get("password_hash", "")):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    profile = await db.profiles.find_one({"id": user["id"]}, {"_id": 0})
    if not profile:
        raise HTTPException(status_code=403, detail="Profile not found")

    token = create_access_token(user["id"], profile.get("role"))
    return TokenResponse(access_token=token, user=Profile(**profile))


@router.get("/me")
async def get_me(db=Depends(get_db), current_user: dict = Depends(get_current_user)):
    """Current profile plus the clients it is linked to"""
    return {
        **serialize_doc(current_user),
        "client_ids": await linked_client_ids(db, current_user["id"]),
    }


@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    db=Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    now = utc_now_iso()
    await db.users.update_one(
        {"id": current_user["id"]},
        {"$set": {"password_hash": hash_password(request.new_password), "updated_at": now}},
    )
    await db.profiles.update_one(
        {"id": current_user["id"]},
        {"$set": {"needs_password_change": False, "updated_at": now}},
    )
    return {"ok": True}
