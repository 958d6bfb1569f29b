from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.admin import admin_service as service
from syllabus_hub.admin.admin_schemas import ApprovalDecision, UserRoleUpdate
from syllabus_hub.catalog.catalog_schemas import (
    BranchCreate, BranchUpdate, SubjectCreate, SubjectUpdate
)
from syllabus_hub.database import get_db
from syllabus_hub.dependencies import UserContext, require_admin
from syllabus_hub.pagination import PageParams, page_params
from syllabus_hub.resources import resource_service
from syllabus_hub.resources.resource_models import ResourceType
from syllabus_hub.roadmaps import roadmap_service
from syllabus_hub.roadmaps.roadmap_models import Difficulty, RoadmapType
from syllabus_hub.roadmaps.roadmap_schemas import RoadmapUpdate
from syllabus_hub.users.user_models import UserRole

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

# ==================== DASHBOARD ====================

@router.get("/dashboard/stats")
async def get_dashboard_stats(db: AsyncIOMotorDatabase = Depends(get_db)):
    """Platform totals and the latest sign-ups and submissions"""
    return await service.get_dashboard_stats(db)

# ==================== USERS ====================

@router.get("/users")
async def list_users(
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    params: PageParams = Depends(page_params(10)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_users(db, params, search=search, role=role.value if role else None)

@router.patch("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    data: UserRoleUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_user_role(db, user_id, data.role.value)

@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: UserContext = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.delete_user(db, user_id, admin)

# ==================== RESOURCES ====================

@router.get("/resources")
async def list_resources(
    search: Optional[str] = None,
    type: Optional[ResourceType] = None,
    approved: Optional[bool] = None,
    params: PageParams = Depends(page_params(10)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_resources(db, params, search=search, type=type, approved=approved)

@router.patch("/resources/{resource_id}/approve")
async def approve_resource(
    resource_id: str,
    data: ApprovalDecision,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Approve ({"approved": true}) or reject ({"approved": false})"""
    resource = await resource_service.set_approval(db, resource_id, data.approved)
    verdict = "approved" if data.approved else "rejected"
    return {"message": f"Resource {verdict} successfully", "resource": resource}

@router.delete("/resources/{resource_id}")
async def delete_resource(resource_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.delete_resource(db, resource_id)

# ==================== SUBJECTS ====================

@router.get("/subjects")
async def list_subjects(
    search: Optional[str] = None,
    branch: Optional[str] = None,
    params: PageParams = Depends(page_params(10)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_subjects(db, params, search=search, branch=branch)

@router.post("/subjects", status_code=201)
async def create_subject(data: SubjectCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.create_subject(db, data.model_dump())

@router.patch("/subjects/{subject_id}")
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_subject(db, subject_id, data.model_dump(exclude_none=True))

@router.delete("/subjects/{subject_id}")
async def delete_subject(subject_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.delete_subject(db, subject_id)

# ==================== BRANCHES ====================

@router.get("/branches")
async def list_branches(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_branches(db)

@router.post("/branches", status_code=201)
async def create_branch(data: BranchCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.create_branch(db, data.model_dump())

@router.patch("/branches/{branch_id}")
async def update_branch(
    branch_id: str,
    data: BranchUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_branch(db, branch_id, data.model_dump(exclude_none=True))

@router.delete("/branches/{branch_id}")
async def delete_branch(branch_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.delete_branch(db, branch_id)

# ==================== ROADMAPS ====================

@router.get("/roadmaps")
async def list_roadmaps(
    search: Optional[str] = None,
    type: Optional[RoadmapType] = None,
    difficulty: Optional[Difficulty] = None,
    params: PageParams = Depends(page_params(10)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_roadmaps(db, params, search=search, type=type, difficulty=difficulty)

@router.patch("/roadmaps/{roadmap_id}")
async def update_roadmap(
    roadmap_id: str,
    data: RoadmapUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await roadmap_service.update_roadmap(db, roadmap_id, data.model_dump(exclude_none=True))

@router.patch("/roadmaps/{roadmap_id}/approve")
async def approve_roadmap(
    roadmap_id: str,
    data: ApprovalDecision,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    roadmap = await roadmap_service.set_roadmap_approval(db, roadmap_id, data.approved)
    verdict = "approved" if data.approved else "rejected"
    return {"message": f"Roadmap {verdict} successfully", "roadmap": roadmap}

@router.delete("/roadmaps/{roadmap_id}")
async def delete_roadmap(roadmap_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await roadmap_service.delete_roadmap(db, roadmap_id)
