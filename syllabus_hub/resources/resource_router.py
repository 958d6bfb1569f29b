from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import get_db
from syllabus_hub.dependencies import (
    UserContext, get_current_user, get_optional_user, require_staff
)
from syllabus_hub.pagination import PageParams, page_params
from syllabus_hub.resources import resource_service as service
from syllabus_hub.resources.resource_models import ResourceSort, ResourceType
from syllabus_hub.resources.resource_schemas import (
    ResourceApproval, ResourceCreate, ResourceUpdate
)

router = APIRouter(prefix="/resources", tags=["Resources"])

# ==================== PUBLIC ====================

@router.get("")
async def list_resources(
    q: Optional[str] = Query(None, max_length=200),
    type: Optional[ResourceType] = None,
    branch: Optional[str] = None,
    semester: Optional[int] = Query(None, ge=1),
    subject: Optional[str] = None,
    sort: ResourceSort = ResourceSort.CREATED_AT,
    include_unapproved: bool = False,
    params: PageParams = Depends(page_params(20)),
    user: Optional[UserContext] = Depends(get_optional_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Browse resources. Unapproved items are listed only for moderators and
    admins who ask for them with include_unapproved=true.
    """
    return await service.list_resources(
        db, params, q=q, type=type, branch=branch, semester=semester,
        subject=subject, sort=sort, include_unapproved=include_unapproved, user=user
    )

@router.get("/{resource_id}")
async def get_resource(resource_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.get_resource(db, resource_id)

# ==================== CONTRIBUTORS ====================

@router.post("", status_code=201)
async def create_resource(
    data: ResourceCreate,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Submit a resource for review"""
    return await service.create_resource(db, data.model_dump(), user)

@router.put("/{resource_id}")
async def update_resource(
    resource_id: str,
    data: ResourceUpdate,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_resource(db, resource_id, data.model_dump(exclude_none=True), user)

@router.delete("/{resource_id}")
async def delete_resource(
    resource_id: str,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.delete_resource(db, resource_id, user)

# ==================== MODERATION ====================

@router.patch("/{resource_id}/approve")
async def approve_resource(
    resource_id: str,
    data: Optional[ResourceApproval] = None,
    user: UserContext = Depends(require_staff),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    approved = data.approved if data is not None else True
    return await service.set_approval(db, resource_id, approved)
