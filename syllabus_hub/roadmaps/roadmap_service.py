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
from syllabus_hub.roadmaps.roadmap_models import (
    Difficulty, Roadmap, RoadmapStep, RoadmapType, total_hours
)

logger = get_logger("roadmaps")

ROADMAP_SORT = [("type", 1), ("difficulty", 1), ("created_at", -1)]
STEP_RESOURCE_FIELDS = {
    "title": 1, "type": 1, "url": 1, "provider": 1,
    "average_rating": 1, "total_ratings": 1,
}

# ==================== POPULATION ====================

async def attach_roadmap_references(db: AsyncIOMotorDatabase, roadmaps: List[dict]) -> List[dict]:
    """
    Populate subject, creator and step resources. Steps come back sorted by
    order; step resources that no longer exist are skipped.
    """
    subject_ids = list({r.get("subject_id") for r in roadmaps if r.get("subject_id")})
    subjects = await db.subjects.find(
        {"_id": {"$in": subject_ids}}, {"code": 1, "name": 1, "branch_id": 1}
    ).to_list(length=None) if subject_ids else []
    subjects_by_id = {s["_id"]: s for s in subjects}

    users_by_id = await get_user_summaries(db, [r.get("created_by") for r in roadmaps])

    resource_ids = list({
        rid
        for roadmap in roadmaps
        for step in roadmap.get("steps", [])
        for rid in step.get("resources", [])
    })
    resources = await db.resources.find(
        {"_id": {"$in": resource_ids}}, STEP_RESOURCE_FIELDS
    ).to_list(length=None) if resource_ids else []
    resources_by_id = {r["_id"]: r for r in resources}

    for roadmap in roadmaps:
        roadmap["subject"] = subjects_by_id.get(roadmap.get("subject_id"))
        roadmap["created_by_user"] = users_by_id.get(roadmap.get("created_by"))
        steps = sorted(roadmap.get("steps", []), key=lambda s: s.get("order", 0))
        for step in steps:
            step["resources"] = [
                resources_by_id[rid] for rid in step.get("resources", []) if rid in resources_by_id
            ]
        roadmap["steps"] = steps
    return roadmaps


def _steps_for_storage(steps: List[dict]) -> List[dict]:
    return [
        RoadmapStep(
            **{**step, "resources": [to_object_id(rid, "resource id") for rid in step.get("resources", [])]}
        ).model_dump()
        for step in steps
    ]

# ==================== QUERIES ====================

async def list_roadmaps(
    db: AsyncIOMotorDatabase,
    params: PageParams,
    branch: Optional[str] = None,
    type: Optional[RoadmapType] = None,
    difficulty: Optional[Difficulty] = None
) -> dict:
    """Public, approved roadmaps with optional branch/type/difficulty filters"""
    query = {"is_public": True, "is_approved": True}
    if type is not None:
        query["type"] = RoadmapType(type).value
    if difficulty is not None:
        query["difficulty"] = Difficulty(difficulty).value

    subject_ids = await resolve_subject_ids(db, branch_code=branch)
    if subject_ids is not None:
        if not subject_ids:
            return empty_page(params)
        query["subject_id"] = {"$in": subject_ids}

    roadmaps = await db.roadmaps.find(query).sort(ROADMAP_SORT).skip(
        params.skip
    ).limit(params.limit).to_list(length=params.limit)
    total = await db.roadmaps.count_documents(query)
    await attach_roadmap_references(db, roadmaps)
    return paginated(serialize_many(roadmaps), params, total)


async def list_subject_roadmaps(
    db: AsyncIOMotorDatabase,
    code: str,
    type: Optional[RoadmapType] = None,
    difficulty: Optional[Difficulty] = None
) -> List[dict]:
    subject = await db.subjects.find_one({"code": code}, {"_id": 1})
    if not subject:
        raise NotFoundError("Subject not found")

    query = {"subject_id": subject["_id"], "is_public": True, "is_approved": True}
    if type is not None:
        query["type"] = RoadmapType(type).value
    if difficulty is not None:
        query["difficulty"] = Difficulty(difficulty).value

    roadmaps = await db.roadmaps.find(query).sort(ROADMAP_SORT).to_list(length=None)
    await attach_roadmap_references(db, roadmaps)
    return serialize_many(roadmaps)


async def get_roadmap(db: AsyncIOMotorDatabase, roadmap_id: str) -> dict:
    roadmap = await db.roadmaps.find_one({"_id": to_object_id(roadmap_id, "roadmap id")})
    if not roadmap:
        raise NotFoundError("Roadmap not found")
    await attach_roadmap_references(db, [roadmap])
    return serialize_doc(roadmap)

# ==================== MUTATIONS ====================

async def create_roadmap(db: AsyncIOMotorDatabase, data: dict, user: UserContext) -> dict:
    """Moderator/admin authored roadmap, published on creation"""
    subject_oid = to_object_id(data.pop("subject_id"), "subject id")
    if not await db.subjects.find_one({"_id": subject_oid}, {"_id": 1}):
        raise ValidationError("Subject does not exist")
    if not data.get("steps"):
        raise ValidationError("At least one step is required")

    steps = _steps_for_storage(data.pop("steps"))
    roadmap = Roadmap(
        subject_id=subject_oid,
        steps=steps,
        total_estimated_hours=total_hours(steps),
        created_by=to_object_id(user.user_id, "user id"),
        **data
    )
    result = await db.roadmaps.insert_one(roadmap.model_dump())
    logger.info("Roadmap %s created by %s", result.inserted_id, user.user_id)
    return await get_roadmap(db, result.inserted_id)


async def update_roadmap(
    db: AsyncIOMotorDatabase,
    roadmap_id: str,
    updates: dict,
    user: Optional[UserContext] = None
) -> dict:
    """
    Patch a roadmap. Only its creator or an admin may edit; user=None is
    the admin console path where the role was already checked.
    """
    roadmap = await db.roadmaps.find_one({"_id": to_object_id(roadmap_id, "roadmap id")})
    if not roadmap:
        raise NotFoundError("Roadmap not found")
    if user is not None and str(roadmap.get("created_by")) != user.user_id and not user.is_admin:
        raise ForbiddenError("Not authorized to update this roadmap")

    for field in ("type", "difficulty"):
        if field in updates:
            updates[field] = getattr(updates[field], "value", updates[field])
    if "steps" in updates:
        updates["steps"] = _steps_for_storage(updates["steps"])
        updates["total_estimated_hours"] = total_hours(updates["steps"])

    updates["updated_at"] = utcnow()
    await db.roadmaps.update_one({"_id": roadmap["_id"]}, {"$set": updates})
    return await get_roadmap(db, roadmap["_id"])


async def set_roadmap_approval(db: AsyncIOMotorDatabase, roadmap_id: str, approved: bool) -> dict:
    oid = to_object_id(roadmap_id, "roadmap id")
    result = await db.roadmaps.update_one(
        {"_id": oid},
        {"$set": {"is_approved": approved, "updated_at": utcnow()}}
    )
    if result.matched_count == 0:
        raise NotFoundError("Roadmap not found")
    return await get_roadmap(db, oid)


async def delete_roadmap(
    db: AsyncIOMotorDatabase,
    roadmap_id: str,
    user: Optional[UserContext] = None
) -> dict:
    roadmap = await db.roadmaps.find_one({"_id": to_object_id(roadmap_id, "roadmap id")})
    if not roadmap:
        raise NotFoundError("Roadmap not found")
    if user is not None and str(roadmap.get("created_by")) != user.user_id and not user.is_admin:
        raise ForbiddenError("Not authorized to delete this roadmap")

    await db.roadmaps.delete_one({"_id": roadmap["_id"]})
    return {"message": "Roadmap deleted successfully"}
