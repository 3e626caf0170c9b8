"""Admin routes: client (tenant) management and user accounts"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pymongo.errors import DuplicateKeyError, PyMongoError
import logging

from leadloop.core.auth import require_admin, hash_password
from leadloop.core.database import get_db
from leadloop.core.security import audit_log
from leadloop.core.utils import serialize_doc, serialize_docs, utc_now_iso
from leadloop.models import (
    Client, ClientCreate, ClientUpdate,
    Profile, UserCreate, UserUpdate, MoveUserRequest, NeedsPasswordChangeRequest,
    generate_id,
)

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


# ============= CLIENTS =============

@router.get("/clients")
async def list_clients(db=Depends(get_db), admin: dict = Depends(require_admin)):
    clients = await db.clients.find({}, {"_id": 0}).sort("created_at", -1).to_list(1000)
    return {"ok": True, "clients": serialize_docs(clients)}


@router.post("/clients", status_code=201)
async def create_client(
    data: ClientCreate,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Create a client; the id is always generated server-side"""
    if not data.business_name.strip():
        raise HTTPException(status_code=400, detail="business_name required")

    client = Client(**data.model_dump())
    client.business_name = client.business_name.strip()
    client_dict = client.model_dump(mode='json')

    try:
        await db.clients.insert_one(client_dict)
    except PyMongoError as exc:
        logger.error(f"[admin/clients] create error: {exc}")
        raise HTTPException(status_code=500, detail="Failed to create client")

    logger.info(f"[admin/clients] created {client.id} ({client.business_name})")
    await audit_log(db, "CREATE", "client", client.id, admin["id"], client.id,
                    after=serialize_doc(client_dict), request=request)
    return {"ok": True, "client": serialize_doc(client_dict)}


@router.patch("/clients/{client_id}")
async def update_client(
    client_id: str,
    data: ClientUpdate,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    updates = data.model_dump(mode='json', exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No updatable fields provided")
    if "business_name" in updates and not (updates["business_name"] or "").strip():
        raise HTTPException(status_code=400, detail="business_name cannot be blank")
    updates["updated_at"] = utc_now_iso()

    before = await db.clients.find_one({"id": client_id}, {"_id": 0})
    if not before:
        raise HTTPException(status_code=404, detail="Client not found")

    try:
        await db.clients.update_one({"id": client_id}, {"$set": updates})
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="Twilio number already assigned to another client")
    except PyMongoError as exc:
        logger.error(f"[admin/clients] update error for {client_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to update client")

    client = await db.clients.find_one({"id": client_id}, {"_id": 0})
    await audit_log(db, "UPDATE", "client", client_id, admin["id"], client_id,
                    before=serialize_doc(before), after=serialize_doc(client), request=request)
    return {"ok": True, "client": serialize_doc(client)}


@router.delete("/clients/{client_id}")
async def delete_client(
    client_id: str,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Delete a client and every row that belongs to it"""
    before = await db.clients.find_one({"id": client_id}, {"_id": 0})
    if not before:
        raise HTTPException(status_code=404, detail="Client not found")

    try:
        await db.client_users.delete_many({"client_id": client_id})
        await db.customer_contacts.delete_many({"client_id": client_id})
        await db.leads.delete_many({"client_id": client_id})
        await db.reviews.delete_many({"client_id": client_id})
        await db.clients.delete_one({"id": client_id})
    except PyMongoError as exc:
        logger.error(f"[admin/clients] delete error for {client_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to delete client")

    logger.info(f"[admin/clients] deleted {client_id}")
    await audit_log(db, "DELETE", "client", client_id, admin["id"], client_id,
                    before=serialize_doc(before), request=request)
    return {"ok": True}


@router.get("/clients/{client_id}/users")
async def list_client_users(client_id: str, db=Depends(get_db), admin: dict = Depends(require_admin)):
    """Profiles linked to a client"""
    links = await db.client_users.find({"client_id": client_id}, {"_id": 0}).to_list(1000)
    user_ids = [link["user_id"] for link in links if link.get("user_id")]
    if not user_ids:
        return {"ok": True, "users": []}

    profiles = await db.profiles.find(
        {"id": {"$in": user_ids}}, {"_id": 0}
    ).sort("created_at", -1).to_list(1000)
    return {"ok": True, "users": serialize_docs(profiles)}


# ============= USERS =============

@router.get("/users")
async def list_users(db=Depends(get_db), admin: dict = Depends(require_admin)):
    profiles = await db.profiles.find({}, {"_id": 0}).sort("created_at", -1).to_list(1000)
    return {"ok": True, "users": serialize_docs(profiles)}


@router.post("/users", status_code=201)
async def create_user(
    data: UserCreate,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Create login credentials, a profile, and optionally a client link.

    If the profile cannot be written the credentials are deleted again so no
    orphan login is left behind. A failed client link keeps the user and
    returns a warning instead.
    """
    email = data.email.strip().lower()
    if await db.users.find_one({"email": email}):
        raise HTTPException(status_code=409, detail="User already exists")

    now = utc_now_iso()
    user_id = generate_id()
    try:
        await db.users.insert_one({
            "id": user_id,
            "email": email,
            "password_hash": hash_password(data.password),
            "created_at": now,
            "updated_at": now,
        })
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="User already exists")
    except PyMongoError as exc:
        logger.error(f"[admin/users] create identity error: {exc}")
        raise HTTPException(status_code=500, detail="Failed to create user")

    profile = Profile(
        id=user_id,
        email=email,
        display_name=data.display_name,
        phone=data.phone,
        role=data.role,
        needs_password_change=True,
    )
    profile_dict = profile.model_dump(mode='json')

    try:
        await db.profiles.update_one({"id": user_id}, {"$set": profile_dict}, upsert=True)
    except PyMongoError as exc:
        logger.error(f"[admin/users] profile upsert failed for {user_id}: {exc}")
        try:
            await db.users.delete_one({"id": user_id})
        except Exception as cleanup_exc:
            logger.error(f"[admin/users] cleanup of identity {user_id} failed: {cleanup_exc}")
        raise HTTPException(status_code=500, detail="User created but profile setup failed")

    await audit_log(db, "CREATE", "user", user_id, admin["id"], data.client_id,
                    after=profile_dict, request=request)

    response = {"ok": True, "user": {**profile_dict, "client_id": data.client_id}}

    if data.client_id:
        try:
            await db.client_users.insert_one({
                "user_id": user_id,
                "client_id": data.client_id,
                "created_at": now,
            })
        except PyMongoError as exc:
            logger.error(f"[admin/users] client link failed for {user_id}: {exc}")
            response["warning"] = "User created but failed to link user to client"

    return response


@router.patch("/users/{user_id}")
async def update_user(
    user_id: str,
    data: UserUpdate,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Update profile fields; client_ids, when given, replaces the user's client links"""
    updates = data.model_dump(mode='json', exclude_unset=True, exclude={"client_ids"})
    updates = {k: v for k, v in updates.items() if v is not None}

    profile = await db.profiles.find_one({"id": user_id}, {"_id": 0})
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        if updates:
            updates["updated_at"] = utc_now_iso()
            await db.profiles.update_one({"id": user_id}, {"$set": updates})

        if data.client_ids is not None:
            await db.client_users.delete_many({"user_id": user_id})
            if data.client_ids:
                now = utc_now_iso()
                await db.client_users.insert_many([
                    {"user_id": user_id, "client_id": cid, "created_at": now}
                    for cid in dict.fromkeys(data.client_ids)
                ])
    except PyMongoError as exc:
        logger.error(f"[admin/users] update error for {user_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to update user")

    await audit_log(db, "UPDATE", "user", user_id, admin["id"],
                    before=profile, after=updates, request=request)
    return {"ok": True}


@router.post("/users/{user_id}/move")
async def move_user_to_client(
    user_id: str,
    data: MoveUserRequest,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Reassign a user to exactly one client"""
    if not await db.profiles.find_one({"id": user_id}, {"_id": 0}):
        raise HTTPException(status_code=404, detail="User not found")
    if not await db.clients.find_one({"id": data.client_id}, {"_id": 0}):
        raise HTTPException(status_code=404, detail="Client not found")

    before = await db.client_users.find({"user_id": user_id}, {"_id": 0}).to_list(1000)
    try:
        await db.client_users.delete_many({"user_id": user_id})
        await db.client_users.insert_one({
            "user_id": user_id,
            "client_id": data.client_id,
            "created_at": utc_now_iso(),
        })
    except PyMongoError as exc:
        logger.error(f"[admin/users] move error for {user_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to move user")

    await audit_log(db, "UPDATE", "user", user_id, admin["id"], data.client_id,
                    before={"client_ids": [link.get("client_id") for link in before]},
                    after={"client_ids": [data.client_id]}, request=request)
    return {"ok": True}


@router.post("/users/{user_id}/needs-password-change")
async def set_needs_password_change(
    user_id: str,
    data: NeedsPasswordChangeRequest,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    result = await db.profiles.update_one(
        {"id": user_id},
        {"$set": {"needs_password_change": data.value, "updated_at": utc_now_iso()}},
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="User not found")

    await audit_log(db, "UPDATE", "user", user_id, admin["id"],
                    after={"needs_password_change": data.value}, request=request)
    return {"ok": True}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    request: Request,
    db=Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """Remove client links, then the profile, then the login credentials"""
    try:
        await db.client_users.delete_many({"user_id": user_id})
        await db.profiles.delete_one({"id": user_id})
        await db.users.delete_one({"id": user_id})
    except PyMongoError as exc:
        logger.error(f"[admin/users] delete error for {user_id}: {exc}")
        raise HTTPException(status_code=500, detail="Failed to delete user")

    await audit_log(db, "DELETE", "user", user_id, admin["id"], request=request)
    return {"ok": True}
