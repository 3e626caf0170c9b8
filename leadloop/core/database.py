"""MongoDB async database connection - single source of truth"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from leadloop.core.config import MONGO_URL, DB_NAME

client: AsyncIOMotorClient = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]


def get_db() -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the shared database handle"""
    return db


async def ensure_indexes(database) -> None:
    """Create the indexes the routing and login lookups rely on"""
    await database.clients.create_index("id", unique=True)
    # An inbound Twilio number identifies at most one client
    await database.clients.create_index(
        "twilio_number",
        unique=True,
        partialFilterExpression={"twilio_number": {"$type": "string"}},
    )
    await database.users.create_index("email", unique=True)
    await database.profiles.create_index("id", unique=True)
    await database.client_users.create_index([("user_id", 1), ("client_id", 1)], unique=True)
    await database.leads.create_index([("client_id", 1), ("created_at", -1)])
    await database.reviews.create_index([("client_id", 1), ("created_at", -1)])
    await database.customer_contacts.create_index([("client_id", 1), ("phone", 1), ("created_at", -1)])
