from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import get_db
from syllabus_hub.dependencies import UserContext, get_current_user, require_admin
from syllabus_hub.pagination import PageParams, page_params
from syllabus_hub.ratings import rating_service as service
from syllabus_hub.ratings.rating_schemas import RatingSubmit

router = APIRouter(prefix="/ratings", tags=["Ratings"])

@router.get("")
async def list_all_ratings(
    params: PageParams = Depends(page_params(10)),
    admin: UserContext = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """All ratings, newest first (admin only)"""
    return await service.list_all_ratings(db, params)

@router.get("/resource/{resource_id}")
async def list_resource_ratings(
    resource_id: str,
    params: PageParams = Depends(page_params(10)),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_resource_ratings(db, resource_id, params)

@router.post("/resource/{resource_id}", status_code=201)
async def submit_rating(
    resource_id: str,
    data: RatingSubmit,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Rate a resource. Submitting again replaces the previous rating.
    """
    return await service.submit_rating(db, resource_id, user, data.rating, data.review)

@router.delete("/resource/{resource_id}/{rating_id}")
async def delete_rating(
    resource_id: str,
    rating_id: str,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.delete_rating(db, resource_id, rating_id, user)

@router.post("/{rating_id}/helpful")
async def vote_helpful(
    rating_id: str,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.vote_helpful(db, rating_id, user)
