from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, TEXT

from syllabus_hub import config
from syllabus_hub.errors import ValidationError
from syllabus_hub.logging_config import get_logger

logger = get_logger("database")

_client: Optional[AsyncIOMotorClient] = None

# Fields never sent to clients
USER_PRIVATE_FIELDS = {
    "password_hash": 0,
    "verification_token_hash": 0,
    "verification_expires": 0,
}


def get_client() -> AsyncIOMotorClient:
    """Lazily create the shared Mongo client"""
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(config.MONGO_URI)
    return _client


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


# ==================== DEPENDENCY ====================

async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency"""
    return get_client()[config.MONGO_DB_NAME]


# ==================== HELPERS ====================

def to_object_id(value: Any, label: str = "id") -> ObjectId:
    """Parse a client-supplied id, 400 on malformed input"""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {label}")


def serialize_doc(value: Any) -> Any:
    """Recursively turn ObjectIds into strings so documents are JSON-safe"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize_doc(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize_doc(item) for item in value]
    return value


def serialize_many(docs: list[dict]) -> list[dict]:
    return [serialize_doc(doc) for doc in docs]


def utcnow() -> datetime:
    return datetime.utcnow()


async def get_user_summaries(db: AsyncIOMotorDatabase, user_ids) -> dict:
    """Map user _id -> {_id, name} for display; unknown ids are absent"""
    ids = list({uid for uid in user_ids if uid is not None})
    if not ids:
        return {}
    users = await db.users.find({"_id": {"$in": ids}}, {"name": 1}).to_list(length=None)
    return {user["_id"]: {"_id": user["_id"], "name": user.get("name")} for user in users}


# ==================== INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create unique natural keys and text indexes"""
    await db.users.create_index("email", unique=True)
    await db.users.create_index("verification_token_hash", sparse=True)

    await db.branches.create_index("code", unique=True)
    await db.programs.create_index("code", unique=True)
    await db.programs.create_index("branch_id")
    await db.years.create_index([("program_id", ASCENDING), ("year", ASCENDING)], unique=True)
    await db.semesters.create_index([("year_id", ASCENDING), ("number", ASCENDING)], unique=True)
    await db.subjects.create_index("code", unique=True)
    await db.subjects.create_index([("branch_id", ASCENDING), ("semester_id", ASCENDING)])
    await db.subjects.create_index(
        [("name", TEXT), ("code", TEXT), ("topics", TEXT)],
        name="subject_text"
    )

    await db.resources.create_index(
        [("title", TEXT), ("description", TEXT), ("tags", TEXT)],
        name="resource_text"
    )
    await db.resources.create_index([("subject_id", ASCENDING), ("type", ASCENDING)])
    await db.resources.create_index([("is_approved", ASCENDING), ("created_at", DESCENDING)])
    await db.resources.create_index([("quality_score", DESCENDING)])
    await db.resources.create_index("added_by")

    await db.ratings.create_index([("resource_id", ASCENDING), ("user_id", ASCENDING)], unique=True)
    await db.ratings.create_index([("resource_id", ASCENDING), ("created_at", DESCENDING)])
    await db.rating_votes.create_index([("rating_id", ASCENDING), ("user_id", ASCENDING)], unique=True)

    await db.roadmaps.create_index([("subject_id", ASCENDING), ("type", ASCENDING)])
    await db.roadmaps.create_index([("is_public", ASCENDING), ("is_approved", ASCENDING)])
    await db.roadmaps.create_index(
        [("title", TEXT), ("description", TEXT), ("tags", TEXT)],
        name="roadmap_text"
    )

    logger.info("MongoDB indexes ensured")
