from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.catalog.catalog_service import resolve_subject_ids
from syllabus_hub.database import (
    get_user_summaries, serialize_doc, serialize_many, to_object_id, utcnow
)
from syllabus_hub.dependencies import UserContext
from syllabus_hub.errors import ForbiddenError, NotFoundError, ValidationError
from syllabus_hub.logging_config import get_logger
from syllabus_hub.pagination import PageParams, empty_page, paginated
from syllabus_hub.resources.resource_models import (
    SORT_FIELDS, Resource, ResourceSort, ResourceType
)

logger = get_logger("resources")

# Only the aggregation routine writes these
DERIVED_FIELDS = ("average_rating", "total_ratings", "rating_distribution")
STAFF_ONLY_FIELDS = ("is_approved", "quality_score")

# ==================== FILTER COMPOSITION ====================

async def build_resource_filter(
    db: AsyncIOMotorDatabase,
    q: Optional[str] = None,
    type: Optional[ResourceType] = None,
    branch: Optional[str] = None,
    semester: Optional[int] = None,
    subject: Optional[str] = None,
    include_unapproved: bool = False,
    user: Optional[UserContext] = None
) -> Optional[dict]:
    """
    Compose the Mongo filter for a resource listing.

    Returns None when the branch/semester constraints cannot match any
    subject, so callers can answer with an empty page without querying.
    """
    query = {}
    if not (include_unapproved and user is not None and user.is_staff):
        query["is_approved"] = True

    if type is not None:
        query["type"] = ResourceType(type).value

    subject_id = to_object_id(subject, "subject id") if subject else None

    subject_ids = await resolve_subject_ids(db, branch, semester)
    if subject_ids is not None:
        if subject_id is not None:
            subject_ids = [sid for sid in subject_ids if sid == subject_id]
        if not subject_ids:
            return None
        query["subject_id"] = {"$in": subject_ids}
    elif subject_id is not None:
        query["subject_id"] = subject_id

    if q:
        query["$text"] = {"$search": q}

    return query


def sort_spec(sort: ResourceSort = ResourceSort.CREATED_AT) -> list:
    field, direction = SORT_FIELDS[ResourceSort(sort)]
    return [(field, direction), ("_id", -1)]


async def attach_references(db: AsyncIOMotorDatabase, resources: List[dict]) -> List[dict]:
    """Populate subject {_id, code, name} and added_by_user {_id, name}"""
    subject_ids = list({r.get("subject_id") for r in resources if r.get("subject_id")})
    subjects = await db.subjects.find(
        {"_id": {"$in": subject_ids}}, {"code": 1, "name": 1}
    ).to_list(length=None) if subject_ids else []
    subjects_by_id = {s["_id"]: s for s in subjects}
    users_by_id = await get_user_summaries(db, [r.get("added_by") for r in resources])

    for resource in resources:
        resource["subject"] = subjects_by_id.get(resource.get("subject_id"))
        resource["added_by_user"] = users_by_id.get(resource.get("added_by"))
    return resources


async def find_page(
    db: AsyncIOMotorDatabase,
    query: dict,
    params: PageParams,
    sort: list
) -> dict:
    cursor = db.resources.find(query).sort(sort).skip(params.skip).limit(params.limit)
    resources = await cursor.to_list(length=params.limit)
    total = await db.resources.count_documents(query)
    await attach_references(db, resources)
    return paginated(serialize_many(resources), params, total)

# ==================== QUERIES ====================

async def list_resources(
    db: AsyncIOMotorDatabase,
    params: PageParams,
    q: Optional[str] = None,
    type: Optional[ResourceType] = None,
    branch: Optional[str] = None,
    semester: Optional[int] = None,
    subject: Optional[str] = None,
    sort: ResourceSort = ResourceSort.CREATED_AT,
    include_unapproved: bool = False,
    user: Optional[UserContext] = None
) -> dict:
    """Filtered, sorted, paginated resource listing"""
    query = await build_resource_filter(
        db, q=q, type=type, branch=branch, semester=semester,
        subject=subject, include_unapproved=include_unapproved, user=user
    )
    if query is None:
        return empty_page(params)
    return await find_page(db, query, params, sort_spec(sort))


async def list_subject_resources(
    db: AsyncIOMotorDatabase,
    code: str,
    params: PageParams,
    type: Optional[ResourceType] = None,
    sort: ResourceSort = ResourceSort.QUALITY_SCORE
) -> dict:
    """Approved resources of the subject with this code"""
    subject = await db.subjects.find_one({"code": code}, {"_id": 1})
    if not subject:
        raise NotFoundError("Subject not found")

    query = {"is_approved": True, "subject_id": subject["_id"]}
    if type is not None:
        query["type"] = ResourceType(type).value
    return await find_page(db, query, params, sort_spec(sort))


async def list_user_resources(db: AsyncIOMotorDatabase, user_id: str, params: PageParams) -> dict:
    """A contributor's own submissions, approved or not"""
    query = {"added_by": to_object_id(user_id, "user id")}
    return await find_page(db, query, params, sort_spec(ResourceSort.CREATED_AT))


async def get_resource(db: AsyncIOMotorDatabase, resource_id: str) -> dict:
    resource = await db.resources.find_one({"_id": to_object_id(resource_id, "resource id")})
    if not resource:
        raise NotFoundError("Resource not found")
    await attach_references(db, [resource])
    return serialize_doc(resource)

# ==================== MUTATIONS ====================

async def _require_subject(db: AsyncIOMotorDatabase, subject_id: str):
    oid = to_object_id(subject_id, "subject id")
    if not await db.subjects.find_one({"_id": oid}, {"_id": 1}):
        raise ValidationError("Subject does not exist")
    return oid


async def _owned_resource(db: AsyncIOMotorDatabase, resource_id: str, user: UserContext) -> dict:
    resource = await db.resources.find_one({"_id": to_object_id(resource_id, "resource id")})
    if not resource:
        raise NotFoundError("Resource not found")
    if str(resource.get("added_by")) != user.user_id and not user.is_staff:
        raise ForbiddenError("Not authorized to modify this resource")
    return resource


async def create_resource(db: AsyncIOMotorDatabase, data: dict, user: UserContext) -> dict:
    """Create a resource; pending approval unless a moderator says otherwise"""
    data = {k: v for k, v in data.items() if k not in DERIVED_FIELDS}
    is_approved = data.pop("is_approved", None)
    quality_score = data.pop("quality_score", None)
    data["subject_id"] = await _require_subject(db, data["subject_id"])

    resource = Resource(added_by=to_object_id(user.user_id, "user id"), **data)
    if user.is_staff:
        if is_approved is not None:
            resource.is_approved = is_approved
        if quality_score is not None:
            resource.quality_score = quality_score

    result = await db.resources.insert_one(resource.model_dump())
    logger.info("Resource %s created by %s", result.inserted_id, user.user_id)
    return await get_resource(db, result.inserted_id)


async def update_resource(
    db: AsyncIOMotorDatabase,
    resource_id: str,
    updates: dict,
    user: UserContext
) -> dict:
    """Owner or moderator/admin edit"""
    resource = await _owned_resource(db, resource_id, user)

    updates = {k: v for k, v in updates.items() if k not in DERIVED_FIELDS}
    if not user.is_staff:
        for field in STAFF_ONLY_FIELDS:
            updates.pop(field, None)
    if "subject_id" in updates:
        updates["subject_id"] = await _require_subject(db, updates["subject_id"])
    if "type" in updates:
        updates["type"] = ResourceType(updates["type"]).value

    if updates:
        updates["updated_at"] = utcnow()
        await db.resources.update_one({"_id": resource["_id"]}, {"$set": updates})
    return await get_resource(db, resource["_id"])


async def remove_resource(db: AsyncIOMotorDatabase, resource_oid) -> None:
    """Delete a resource together with its ratings and their votes"""
    ratings = await db.ratings.find({"resource_id": resource_oid}, {"_id": 1}).to_list(length=None)
    rating_ids = [r["_id"] for r in ratings]
    if rating_ids:
        await db.rating_votes.delete_many({"rating_id": {"$in": rating_ids}})
        await db.ratings.delete_many({"resource_id": resource_oid})
    await db.resources.delete_one({"_id": resource_oid})


async def delete_resource(db: AsyncIOMotorDatabase, resource_id: str, user: UserContext) -> dict:
    resource = await _owned_resource(db, resource_id, user)
    await remove_resource(db, resource["_id"])
    logger.info("Resource %s deleted by %s", resource["_id"], user.user_id)
    return {"message": "Resource deleted successfully"}


async def set_approval(db: AsyncIOMotorDatabase, resource_id: str, approved: bool = True) -> dict:
    """Approve or reject (unapprove) a resource"""
    oid = to_object_id(resource_id, "resource id")
    result = await db.resources.update_one(
        {"_id": oid},
        {"$set": {"is_approved": approved, "updated_at": utcnow()}}
    )
    if result.matched_count == 0:
        raise NotFoundError("Resource not found")
    return await get_resource(db, oid)
