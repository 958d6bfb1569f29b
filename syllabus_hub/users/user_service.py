from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from syllabus_hub.database import USER_PRIVATE_FIELDS, serialize_doc, to_object_id, utcnow
from syllabus_hub.dependencies import UserContext
from syllabus_hub.errors import NotFoundError

# ==================== PROFILE ====================

async def get_profile(db: AsyncIOMotorDatabase, user: UserContext) -> dict:
    doc = await db.users.find_one(
        {"_id": to_object_id(user.user_id, "user id")}, USER_PRIVATE_FIELDS
    )
    if not doc:
        raise NotFoundError("User not found")
    return serialize_doc(doc)


async def update_profile(db: AsyncIOMotorDatabase, user: UserContext, data: dict) -> dict:
    if not data:
        return await get_profile(db, user)

    doc = await db.users.find_one_and_update(
        {"_id": to_object_id(user.user_id, "user id")},
        {"$set": {**data, "updated_at": utcnow()}},
        projection=USER_PRIVATE_FIELDS,
        return_document=ReturnDocument.AFTER
    )
    if not doc:
        raise NotFoundError("User not found")
    return serialize_doc(doc)

# ==================== CONTRIBUTIONS ====================

async def get_contribution_stats(db: AsyncIOMotorDatabase, user: UserContext) -> dict:
    """Counts of the caller's submissions by moderation state"""
    owner = {"added_by": to_object_id(user.user_id, "user id")}
    total = await db.resources.count_documents(owner)
    approved = await db.resources.count_documents({**owner, "is_approved": True})

    return {
        "total_resources": total,
        "approved_resources": approved,
        "pending_resources": total - approved,
        "approval_rate": round(approved / total * 100) if total else 0,
    }
