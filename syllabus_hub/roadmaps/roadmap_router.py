from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import get_db
from syllabus_hub.dependencies import UserContext, get_current_user, require_staff
from syllabus_hub.pagination import PageParams, page_params
from syllabus_hub.roadmaps import roadmap_service as service
from syllabus_hub.roadmaps.roadmap_models import Difficulty, RoadmapType
from syllabus_hub.roadmaps.roadmap_schemas import RoadmapCreate, RoadmapUpdate

router = APIRouter(prefix="/roadmaps", tags=["Roadmaps"])

# ==================== PUBLIC ====================

@router.get("")
async def list_roadmaps(
    branch: Optional[str] = None,
    type: Optional[RoadmapType] = None,
    difficulty: Optional[Difficulty] = None,
    params: PageParams = Depends(page_params(20)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_roadmaps(db, params, branch=branch, type=type, difficulty=difficulty)

@router.get("/subject/{code}")
async def list_subject_roadmaps(
    code: str,
    type: Optional[RoadmapType] = None,
    difficulty: Optional[Difficulty] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_subject_roadmaps(db, code, type=type, difficulty=difficulty)

@router.get("/{roadmap_id}")
async def get_roadmap(roadmap_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Roadmap with steps in order and their resources resolved"""
    return await service.get_roadmap(db, roadmap_id)

# ==================== AUTHORING ====================

@router.post("", status_code=201)
async def create_roadmap(
    data: RoadmapCreate,
    user: UserContext = Depends(require_staff),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.create_roadmap(db, data.model_dump(), user)

@router.patch("/{roadmap_id}")
async def update_roadmap(
    roadmap_id: str,
    data: RoadmapUpdate,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Creator or admin only"""
    return await service.update_roadmap(db, roadmap_id, data.model_dump(exclude_none=True), user)

@router.delete("/{roadmap_id}")
async def delete_roadmap(
    roadmap_id: str,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.delete_roadmap(db, roadmap_id, user)
