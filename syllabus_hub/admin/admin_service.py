import re
from datetime import timedelta
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from syllabus_hub.database import (
    USER_PRIVATE_FIELDS, serialize_doc, serialize_many, to_object_id, utcnow
)
from syllabus_hub.dependencies import UserContext
from syllabus_hub.errors import ConflictError, NotFoundError, ValidationError
from syllabus_hub.logging_config import get_logger
from syllabus_hub.pagination import PageParams, paginated
from syllabus_hub.resources.resource_models import ResourceType
from syllabus_hub.resources.resource_service import attach_references, remove_resource
from syllabus_hub.roadmaps.roadmap_models import Difficulty, RoadmapType
from syllabus_hub.roadmaps.roadmap_service import attach_roadmap_references

logger = get_logger("admin")

RECENT_WINDOW = timedelta(days=30)


def search_clause(search: Optional[str], *fields: str) -> dict:
    """Case-insensitive substring match on any of the fields, input escaped"""
    if not search:
        return {}
    pattern = re.escape(search)
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}


async def _page(db_collection, query: dict, params: PageParams, sort) -> tuple:
    docs = await db_collection.find(query).sort(sort).skip(
        params.skip
    ).limit(params.limit).to_list(length=params.limit)
    total = await db_collection.count_documents(query)
    return docs, total

# ==================== DASHBOARD ====================

async def get_dashboard_stats(db: AsyncIOMotorDatabase) -> dict:
    recent_users = await db.users.find({}, USER_PRIVATE_FIELDS).sort(
        "created_at", -1
    ).limit(5).to_list(length=5)
    recent_resources = await db.resources.find().sort("created_at", -1).limit(5).to_list(length=5)
    await attach_references(db, recent_resources)

    return {
        "stats": {
            "total_users": await db.users.count_documents({}),
            "total_resources": await db.resources.count_documents({}),
            "total_subjects": await db.subjects.count_documents({}),
            "total_roadmaps": await db.roadmaps.count_documents({}),
            "pending_resources": await db.resources.count_documents({"is_approved": False}),
            "recent_users": await db.users.count_documents(
                {"created_at": {"$gte": utcnow() - RECENT_WINDOW}}
            ),
        },
        "recent_activity": {
            "users": serialize_many(recent_users),
            "resources": serialize_many(recent_resources),
        },
    }

# ==================== USERS ====================

async def list_users(
    db: AsyncIOMotorDatabase,
    params: PageParams,
    search: Optional[str] = None,
    role: Optional[str] = None
) -> dict:
    query = search_clause(search, "name", "email")
    if role:
        query["role"] = role
    users = await db.users.find(query, USER_PRIVATE_FIELDS).sort("created_at", -1).skip(
        params.skip
    ).limit(params.limit).to_list(length=params.limit)
    total = await db.users.count_documents(query)
    return paginated(serialize_many(users), params, total)


async def update_user_role(db: AsyncIOMotorDatabase, user_id: str, role: str) -> dict:
    user = await db.users.find_one_and_update(
        {"_id": to_object_id(user_id, "user id")},
        {"$set": {"role": role, "updated_at": utcnow()}},
        projection=USER_PRIVATE_FIELDS,
        return_document=ReturnDocument.AFTER
    )
    if not user:
        raise NotFoundError("User not found")
    logger.info("User %s role set to %s", user_id, role)
    return {"message": "User role updated successfully", "user": serialize_doc(user)}


async def delete_user(db: AsyncIOMotorDatabase, user_id: str, admin: UserContext) -> dict:
    if user_id == admin.user_id:
        raise ValidationError("Cannot delete your own account")
    result = await db.users.delete_one({"_id": to_object_id(user_id, "user id")})
    if result.deleted_count == 0:
        raise NotFoundError("User not found")
    logger.info("User %s deleted by %s", user_id, admin.user_id)
    return {"message": "User deleted successfully"}

# ==================== RESOURCES ====================

async def list_resources(
    db: AsyncIOMotorDatabase,
    params: PageParams,
    search: Optional[str] = None,
    type: Optional[ResourceType] = None,
    approved: Optional[bool] = None
) -> dict:
    """Every resource regardless of moderation state"""
    query = search_clause(search, "title", "description")
    if type is not None:
        query["type"] = ResourceType(type).value
    if approved is not None:
        query["is_approved"] = approved

    resources, total = await _page(db.resources, query, params, [("created_at", -1)])
    await attach_references(db, resources)
    return paginated(serialize_many(resources), params, total)


async def delete_resource(db: AsyncIOMotorDatabase, resource_id: str) -> dict:
    oid = to_object_id(resource_id, "resource id")
    if not await db.resources.find_one({"_id": oid}, {"_id": 1}):
        raise NotFoundError("Resource not found")
    await remove_resource(db, oid)
    return {"message": "Resource deleted successfully"}

# ==================== SUBJECTS ====================

async def list_subjects(
    db: AsyncIOMotorDatabase,
    params: PageParams,
    search: Optional[str] = None,
    branch: Optional[str] = None
) -> dict:
    query = search_clause(search, "code", "name")
    if branch:
        query["branch_id"] = to_object_id(branch, "branch id")

    subjects, total = await _page(db.subjects, query, params, [("code", 1)])
    branch_ids = list({s.get("branch_id") for s in subjects})
    branches = await db.branches.find(
        {"_id": {"$in": branch_ids}}, {"code": 1, "name": 1}
    ).to_list(length=None)
    by_id = {b["_id"]: b for b in branches}
    for subject in subjects:
        subject["branch"] = by_id.get(subject.get("branch_id"))
    return paginated(serialize_many(subjects), params, total)


async def _check_subject_parents(db: AsyncIOMotorDatabase, data: dict) -> dict:
    if "branch_id" in data:
        data["branch_id"] = to_object_id(data["branch_id"], "branch id")
        if not await db.branches.find_one({"_id": data["branch_id"]}, {"_id": 1}):
            raise ValidationError("Branch does not exist")
    if "semester_id" in data:
        data["semester_id"] = to_object_id(data["semester_id"], "semester id")
        if not await db.semesters.find_one({"_id": data["semester_id"]}, {"_id": 1}):
            raise ValidationError("Semester does not exist")
    return data


async def create_subject(db: AsyncIOMotorDatabase, data: dict) -> dict:
    data = await _check_subject_parents(db, data)
    if await db.subjects.find_one({"code": data["code"]}, {"_id": 1}):
        raise ConflictError("Subject code already exists")

    now = utcnow()
    doc = {**data, "created_at": now, "updated_at": now}
    result = await db.subjects.insert_one(doc)
    doc["_id"] = result.inserted_id
    return serialize_doc(doc)


async def update_subject(db: AsyncIOMotorDatabase, subject_id: str, data: dict) -> dict:
    oid = to_object_id(subject_id, "subject id")
    data = await _check_subject_parents(db, data)
    if "code" in data and await db.subjects.find_one(
        {"code": data["code"], "_id": {"$ne": oid}}, {"_id": 1}
    ):
        raise ConflictError("Subject code already exists")

    subject = await db.subjects.find_one_and_update(
        {"_id": oid},
        {"$set": {**data, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER
    )
    if not subject:
        raise NotFoundError("Subject not found")
    return serialize_doc(subject)


async def delete_subject(db: AsyncIOMotorDatabase, subject_id: str) -> dict:
    oid = to_object_id(subject_id, "subject id")
    resource_count = await db.resources.count_documents({"subject_id": oid})
    if resource_count:
        raise ValidationError(
            f"Cannot delete subject with {resource_count} associated resources"
        )
    result = await db.subjects.delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFoundError("Subject not found")
    return {"message": "Subject deleted successfully"}

# ==================== BRANCHES ====================

async def list_branches(db: AsyncIOMotorDatabase) -> dict:
    branches = await db.branches.find().sort("code", 1).to_list(length=None)
    return {"branches": serialize_many(branches)}


async def create_branch(db: AsyncIOMotorDatabase, data: dict) -> dict:
    if await db.branches.find_one({"code": data["code"]}, {"_id": 1}):
        raise ConflictError("Branch code already exists")
    doc = dict(data)
    result = await db.branches.insert_one(doc)
    doc["_id"] = result.inserted_id
    return serialize_doc(doc)


async def update_branch(db: AsyncIOMotorDatabase, branch_id: str, data: dict) -> dict:
    oid = to_object_id(branch_id, "branch id")
    if "code" in data and await db.branches.find_one(
        {"code": data["code"], "_id": {"$ne": oid}}, {"_id": 1}
    ):
        raise ConflictError("Branch code already exists")

    branch = await db.branches.find_one_and_update(
        {"_id": oid},
        {"$set": data},
        return_document=ReturnDocument.AFTER
    ) if data else await db.branches.find_one({"_id": oid})
    if not branch:
        raise NotFoundError("Branch not found")
    return serialize_doc(branch)


async def delete_branch(db: AsyncIOMotorDatabase, branch_id: str) -> dict:
    oid = to_object_id(branch_id, "branch id")
    subject_count = await db.subjects.count_documents({"branch_id": oid})
    if subject_count:
        raise ValidationError(
            f"Cannot delete branch with {subject_count} associated subjects"
        )
    result = await db.branches.delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFoundError("Branch not found")
    return {"message": "Branch deleted successfully"}

# ==================== ROADMAPS ====================

async def list_roadmaps(
    db: AsyncIOMotorDatabase,
    params: PageParams,
    search: Optional[str] = None,
    type: Optional[RoadmapType] = None,
    difficulty: Optional[Difficulty] = None
) -> dict:
    """All roadmaps including private and unapproved ones"""
    query = search_clause(search, "title", "description")
    if type is not None:
        query["type"] = RoadmapType(type).value
    if difficulty is not None:
        query["difficulty"] = Difficulty(difficulty).value

    roadmaps, total = await _page(db.roadmaps, query, params, [("created_at", -1)])
    await attach_roadmap_references(db, roadmaps)
    return paginated(serialize_many(roadmaps), params, total)
