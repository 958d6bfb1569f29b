from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import get_db
from syllabus_hub.limiter import SEARCH_LIMIT, limiter
from syllabus_hub.pagination import PageParams, page_params
from syllabus_hub.resources.resource_models import ResourceType
from syllabus_hub.search import search_service as service

router = APIRouter(prefix="/search", tags=["Search"])

@router.get("")
@router.get("/global")
@limiter.limit(SEARCH_LIMIT)
async def global_search(
    request: Request,
    q: str = Query(..., min_length=1, max_length=200),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Mixed results across resources, subjects and roadmaps"""
    return await service.global_search(db, q)

@router.get("/resources")
@limiter.limit(SEARCH_LIMIT)
async def search_resources(
    request: Request,
    q: str = Query(..., min_length=1, max_length=200),
    type: Optional[ResourceType] = None,
    subject: Optional[str] = None,
    params: PageParams = Depends(page_params(20)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.search_resources(db, q, params, type=type, subject=subject)

@router.get("/subjects")
@limiter.limit(SEARCH_LIMIT)
async def search_subjects(
    request: Request,
    q: str = Query(..., min_length=1, max_length=200),
    branch: Optional[str] = None,
    semester: Optional[str] = None,
    params: PageParams = Depends(page_params(20)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.search_subjects(db, q, params, branch=branch, semester=semester)
