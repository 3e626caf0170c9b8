"""Client routes for signed-in users"""
from fastapi import APIRouter, Depends

from leadloop.core.auth import get_current_user, is_admin
from leadloop.core.database import get_db
from leadloop.core.utils import serialize_docs
from leadloop.services.tenants import linked_client_ids

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("/mine")
async def my_clients(db=Depends(get_db), current_user: dict = Depends(get_current_user)):
    """Clients the caller can manage (all of them for admins)"""
    if is_admin(current_user):
        query = {}
    else:
        query = {"id": {"$in": await linked_client_ids(db, current_user["id"])}}
    clients = await db.clients.find(query, {"_id": 0}).sort("created_at", -1).to_list(1000)
    return {"ok": True, "clients": serialize_docs(clients)}
