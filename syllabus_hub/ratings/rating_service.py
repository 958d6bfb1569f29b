from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from syllabus_hub.database import (
    get_user_summaries, serialize_doc, serialize_many, to_object_id, utcnow
)
from syllabus_hub.dependencies import UserContext
from syllabus_hub.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from syllabus_hub.logging_config import get_logger
from syllabus_hub.pagination import PageParams, paginated
from syllabus_hub.ratings.aggregation import recompute_resource_rating

logger = get_logger("ratings")


def _validate_rating_value(rating) -> int:
    if isinstance(rating, float) and rating.is_integer():
        rating = int(rating)
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be an integer between 1 and 5")
    return rating


async def _attach_users(db: AsyncIOMotorDatabase, ratings: list) -> list:
    users_by_id = await get_user_summaries(db, [r.get("user_id") for r in ratings])
    for rating in ratings:
        rating["user"] = users_by_id.get(rating.get("user_id"))
    return ratings

# ==================== SUBMIT ====================

async def submit_rating(
    db: AsyncIOMotorDatabase,
    resource_id: str,
    user: UserContext,
    rating: int,
    review: Optional[str] = None
) -> dict:
    """
    Create or overwrite the caller's rating for a resource, then refresh
    the resource's aggregate before returning.
    """
    rating = _validate_rating_value(rating)
    resource_oid = to_object_id(resource_id, "resource id")
    user_oid = to_object_id(user.user_id, "user id")

    if not await db.resources.find_one({"_id": resource_oid}, {"_id": 1}):
        raise NotFoundError("Resource not found")

    now = utcnow()
    existing = await db.ratings.find_one({"resource_id": resource_oid, "user_id": user_oid})

    if existing:
        doc = await db.ratings.find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": {"rating": rating, "review": review, "updated_at": now}},
            return_document=ReturnDocument.AFTER
        )
    else:
        doc = {
            "resource_id": resource_oid,
            "user_id": user_oid,
            "rating": rating,
            "review": review,
            "helpful_votes": 0,
            "reported_count": 0,
            "is_verified": False,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await db.ratings.insert_one(doc)
        except DuplicateKeyError:
            # Concurrent first submission by the same user; overwrite it
            doc = await db.ratings.find_one_and_update(
                {"resource_id": resource_oid, "user_id": user_oid},
                {"$set": {"rating": rating, "review": review, "updated_at": now}},
                return_document=ReturnDocument.AFTER
            )
        else:
            doc["_id"] = result.inserted_id

    await recompute_resource_rating(db, resource_oid)

    await _attach_users(db, [doc])
    return serialize_doc(doc)

# ==================== READS ====================

async def list_resource_ratings(db: AsyncIOMotorDatabase, resource_id: str, params: PageParams) -> dict:
    """Most helpful first, then newest"""
    query = {"resource_id": to_object_id(resource_id, "resource id")}
    ratings = await db.ratings.find(query).sort(
        [("helpful_votes", -1), ("created_at", -1)]
    ).skip(params.skip).limit(params.limit).to_list(length=params.limit)
    total = await db.ratings.count_documents(query)
    await _attach_users(db, ratings)
    return paginated(serialize_many(ratings), params, total)


async def list_all_ratings(db: AsyncIOMotorDatabase, params: PageParams) -> dict:
    """Every rating with user and resource summaries (admin view)"""
    ratings = await db.ratings.find().sort(
        "created_at", -1
    ).skip(params.skip).limit(params.limit).to_list(length=params.limit)
    total = await db.ratings.count_documents({})

    await _attach_users(db, ratings)
    resource_ids = list({r["resource_id"] for r in ratings})
    resources = await db.resources.find(
        {"_id": {"$in": resource_ids}}, {"title": 1, "type": 1, "provider": 1}
    ).to_list(length=None) if resource_ids else []
    by_id = {r["_id"]: r for r in resources}
    for rating in ratings:
        rating["resource"] = by_id.get(rating["resource_id"])

    return paginated(serialize_many(ratings), params, total)

# ==================== DELETE / VOTES ====================

async def delete_rating(
    db: AsyncIOMotorDatabase,
    resource_id: str,
    rating_id: str,
    user: UserContext
) -> dict:
    """Owner or admin removes a rating; the aggregate is refreshed"""
    resource_oid = to_object_id(resource_id, "resource id")
    rating = await db.ratings.find_one({"_id": to_object_id(rating_id, "rating id")})
    if not rating or rating["resource_id"] != resource_oid:
        raise NotFoundError("Rating not found")
    if str(rating["user_id"]) != user.user_id and not user.is_admin:
        raise ForbiddenError("Not authorized to delete this rating")

    await db.ratings.delete_one({"_id": rating["_id"]})
    await db.rating_votes.delete_many({"rating_id": rating["_id"]})
    await recompute_resource_rating(db, resource_oid)

    return {"message": "Rating deleted successfully"}


async def vote_helpful(db: AsyncIOMotorDatabase, rating_id: str, user: UserContext) -> dict:
    """Count the caller once toward a rating's helpful votes"""
    rating_oid = to_object_id(rating_id, "rating id")
    user_oid = to_object_id(user.user_id, "user id")

    if not await db.ratings.find_one({"_id": rating_oid}, {"_id": 1}):
        raise NotFoundError("Rating not found")

    if await db.rating_votes.find_one({"rating_id": rating_oid, "user_id": user_oid}):
        raise ConflictError("You already marked this rating as helpful")
    try:
        await db.rating_votes.insert_one({
            "rating_id": rating_oid,
            "user_id": user_oid,
            "created_at": utcnow()
        })
    except DuplicateKeyError:
        raise ConflictError("You already marked this rating as helpful")

    updated = await db.ratings.find_one_and_update(
        {"_id": rating_oid},
        {"$inc": {"helpful_votes": 1}},
        return_document=ReturnDocument.AFTER
    )
    return {"message": "Vote recorded", "helpful_votes": updated["helpful_votes"]}
