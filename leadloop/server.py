"""
LeadLoop Backend - Main FastAPI Application
Multi-tenant lead intake, missed-call text-back and review routing for small businesses
"""
from fastapi import FastAPI, APIRouter
import logging
from datetime import datetime, timezone

from leadloop.core.config import (
    validate_security_settings, BOOTSTRAP_ADMIN_EMAIL, BOOTSTRAP_ADMIN_PASSWORD,
)
from leadloop.core.app_setup import configure_cors, configure_rate_limiting
from leadloop.core.auth import hash_password
from leadloop.core.database import client, db, ensure_indexes
from leadloop.core.utils import utc_now_iso
from leadloop.models import Profile, UserRole, generate_id
from leadloop.routes import (
    admin_router, auth_router, clients_router, customers_router,
    leads_router, review_requests_router, reviews_router, voice_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Security validation (fail-fast)
validate_security_settings()

app = FastAPI(title="LeadLoop API", version="1.0.0")
configure_rate_limiting(app)

api_router = APIRouter(prefix="/api")
for router in (
    auth_router,
    admin_router,
    clients_router,
    leads_router,
    reviews_router,
    review_requests_router,
    customers_router,
    voice_router,
):
    api_router.include_router(router)


@api_router.get("/")
async def root():
    return {"message": "LeadLoop API v1.0.0", "status": "healthy"}


@api_router.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(api_router)
configure_cors(app)


async def bootstrap_admin(database) -> None:
    """Create the first admin account from env settings if no admin exists yet"""
    if not BOOTSTRAP_ADMIN_EMAIL or not BOOTSTRAP_ADMIN_PASSWORD:
        return
    if await database.profiles.find_one({"role": UserRole.ADMIN.value}):
        return

    email = BOOTSTRAP_ADMIN_EMAIL.strip().lower()
    user_id = generate_id()
    now = utc_now_iso()
    await database.users.insert_one({
        "id": user_id,
        "email": email,
        "password_hash": hash_password(BOOTSTRAP_ADMIN_PASSWORD),
        "created_at": now,
        "updated_at": now,
    })
    profile = Profile(id=user_id, email=email, role=UserRole.ADMIN, needs_password_change=True)
    await database.profiles.insert_one(profile.model_dump(mode='json'))
    logger.info(f"Created bootstrap admin: {email}")


@app.on_event("startup")
async def startup_event():
    try:
        await ensure_indexes(db)
    except Exception as e:
        logger.error(f"Failed to create indexes: {e}")
    await bootstrap_admin(db)


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()
    logger.info("MongoDB connection closed")
