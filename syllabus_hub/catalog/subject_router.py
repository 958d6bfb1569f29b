from typing import Optional

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.catalog import catalog_service
from syllabus_hub.database import get_db
from syllabus_hub.pagination import PageParams, page_params
from syllabus_hub.resources import resource_service
from syllabus_hub.resources.resource_models import ResourceSort, ResourceType

router = APIRouter(prefix="/subjects", tags=["Subjects"])

@router.get("/{code}")
async def get_subject(code: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Subject detail with branch and semester"""
    return await catalog_service.get_subject_by_code(db, code)

@router.get("/{code}/resources")
async def list_subject_resources(
    code: str,
    type: Optional[ResourceType] = None,
    sort: ResourceSort = ResourceSort.QUALITY_SCORE,
    params: PageParams = Depends(page_params(20)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Approved resources attached to the subject"""
    return await resource_service.list_subject_resources(db, code, params, type=type, sort=sort)
