import asyncio
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import serialize_many, to_object_id
from syllabus_hub.pagination import PageParams, paginated
from syllabus_hub.resources.resource_models import ResourceType
from syllabus_hub.resources.resource_service import attach_references
from syllabus_hub.roadmaps.roadmap_service import attach_roadmap_references

TEXT_SCORE = {"score": {"$meta": "textScore"}}
GLOBAL_LIMIT = 10


def text_filter(q: str, **extra) -> dict:
    return {"$text": {"$search": q}, **extra}


async def _attach_subject_parents(db: AsyncIOMotorDatabase, subjects: list) -> list:
    branch_ids = list({s.get("branch_id") for s in subjects if s.get("branch_id")})
    semester_ids = list({s.get("semester_id") for s in subjects if s.get("semester_id")})
    branches = await db.branches.find(
        {"_id": {"$in": branch_ids}}, {"code": 1, "name": 1}
    ).to_list(length=None) if branch_ids else []
    semesters = await db.semesters.find(
        {"_id": {"$in": semester_ids}}, {"number": 1}
    ).to_list(length=None) if semester_ids else []
    branches_by_id = {b["_id"]: b for b in branches}
    semesters_by_id = {s["_id"]: s for s in semesters}
    for subject in subjects:
        subject["branch"] = branches_by_id.get(subject.get("branch_id"))
        subject["semester"] = semesters_by_id.get(subject.get("semester_id"))
    return subjects

# ==================== SEARCHES ====================

async def search_resources(
    db: AsyncIOMotorDatabase,
    q: str,
    params: PageParams,
    type: Optional[ResourceType] = None,
    subject: Optional[str] = None
) -> dict:
    """Approved resources ranked by text relevance, then quality"""
    query = text_filter(q, is_approved=True)
    if type is not None:
        query["type"] = ResourceType(type).value
    if subject:
        query["subject_id"] = to_object_id(subject, "subject id")

    resources = await db.resources.find(query, TEXT_SCORE).sort(
        [("score", {"$meta": "textScore"}), ("quality_score", -1)]
    ).skip(params.skip).limit(params.limit).to_list(length=params.limit)
    total = await db.resources.count_documents(query)
    await attach_references(db, resources)

    return {**paginated(serialize_many(resources), params, total), "query": q}


async def search_subjects(
    db: AsyncIOMotorDatabase,
    q: str,
    params: PageParams,
    branch: Optional[str] = None,
    semester: Optional[str] = None
) -> dict:
    query = text_filter(q)
    if branch:
        query["branch_id"] = to_object_id(branch, "branch id")
    if semester:
        query["semester_id"] = to_object_id(semester, "semester id")

    subjects = await db.subjects.find(query, TEXT_SCORE).sort(
        [("score", {"$meta": "textScore"})]
    ).skip(params.skip).limit(params.limit).to_list(length=params.limit)
    total = await db.subjects.count_documents(query)
    await _attach_subject_parents(db, subjects)

    return {**paginated(serialize_many(subjects), params, total), "query": q}


async def global_search(db: AsyncIOMotorDatabase, q: str) -> dict:
    """Up to ten hits each of resources, subjects and roadmaps"""
    by_score = [("score", {"$meta": "textScore"})]

    resources, subjects, roadmaps = await asyncio.gather(
        db.resources.find(text_filter(q, is_approved=True), TEXT_SCORE)
        .sort(by_score).limit(GLOBAL_LIMIT).to_list(length=GLOBAL_LIMIT),
        db.subjects.find(text_filter(q), TEXT_SCORE)
        .sort(by_score).limit(GLOBAL_LIMIT).to_list(length=GLOBAL_LIMIT),
        db.roadmaps.find(text_filter(q, is_approved=True, is_public=True), TEXT_SCORE)
        .sort(by_score).limit(GLOBAL_LIMIT).to_list(length=GLOBAL_LIMIT),
    )

    await attach_references(db, resources)
    await _attach_subject_parents(db, subjects)
    await attach_roadmap_references(db, roadmaps)

    return {
        "results": {
            "resources": serialize_many(resources),
            "subjects": serialize_many(subjects),
            "roadmaps": serialize_many(roadmaps),
        },
        "query": q,
    }
